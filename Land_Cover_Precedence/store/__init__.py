"""Layer store package: per-category features of one property session."""

from .layer_store import Layer, PropertySession
from .invariants import check_invariants

__all__ = ["Layer", "PropertySession", "check_invariants"]
