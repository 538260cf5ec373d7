"""Core value types shared across the engine."""

from .ranges import LineRange

__all__ = ["LineRange"]
