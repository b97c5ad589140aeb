"""Integration tests for potluck.

These tests drive the real git binary in temporary directories.

Run with: pytest tests/integration/ -v
Skip with: pytest -m "not integration"
"""
