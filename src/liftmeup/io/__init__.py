"""Persistence for liftmeup: JSON serializers and file-backed profile stores."""

from .profile_store import JsonProfileStore, MemoryStore, ProfileRegistry, StoreError
from .serializers import ValidationError

__all__ = ["JsonProfileStore", "MemoryStore", "ProfileRegistry", "StoreError", "ValidationError"]
