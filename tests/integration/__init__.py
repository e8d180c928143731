"""Integration tests for kvcommons."""
