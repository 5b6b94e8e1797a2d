"""Tests for the `fork_test_rpc` package."""
