"""Tests for the `fork_test_execution` package."""
