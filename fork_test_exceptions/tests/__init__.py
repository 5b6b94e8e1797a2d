"""Tests for the `fork_test_exceptions` package."""
