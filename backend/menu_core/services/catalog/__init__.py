"""
Catalog graph services: composition resolution and the delete guard.
"""

from .composition import CompositionResolver, effective_price
from .dependency_guard import DependencyGuard

__all__ = [
    "CompositionResolver",
    "DependencyGuard",
    "effective_price",
]
