"""Tests for the `fork_checks` package."""
