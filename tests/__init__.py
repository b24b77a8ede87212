"""Tests for assetlib."""
