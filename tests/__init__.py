"""
Test Suite

Contains unit tests for the adapter core.

Structure:
- tests/conftest.py: Shared fixtures (adapter instance, recorded venue payloads)
- tests/unit/: Tests for individual components (signing, normalization, errors)

Uses pytest; no network access is needed since adapters never perform I/O.
"""
