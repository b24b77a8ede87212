from assetlib.commands import cli

cli()
