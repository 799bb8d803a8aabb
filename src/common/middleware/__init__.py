"""Common middleware for Taquilla."""

from .observability import StructlogContextMiddleware

__all__ = ["StructlogContextMiddleware"]
