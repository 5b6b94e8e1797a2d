"""Tests for the `fork_test_types` package."""
