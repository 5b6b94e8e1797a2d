"""Tests for the `fork_test_logging` package."""
