"""
Data access: generic repository and the kind-addressed catalog store.
"""

from .repository import BaseRepository
from .store import CatalogStore, MODEL_BY_KIND

__all__ = [
    "BaseRepository",
    "CatalogStore",
    "MODEL_BY_KIND",
]
