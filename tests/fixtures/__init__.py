"""Shared test fixtures for keepsake tests."""
