"""Tests for the `fork_test_base_types` package."""
