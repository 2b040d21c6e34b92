"""Core module for the squadgo application."""

from .store import DocumentStore, Transaction
from .types import StoreDocument, UserProfile

__all__ = ["DocumentStore", "StoreDocument", "Transaction", "UserProfile"]
