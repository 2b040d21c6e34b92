"""Pytest configuration shared by the test modules."""

from tests.mock_utils import MockFirestoreBuilder, patch_mockfirestore

patch_mockfirestore()

__all__ = ["MockFirestoreBuilder", "patch_mockfirestore"]
