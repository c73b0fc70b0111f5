"""Shared abstractions used across feature modules."""

from .repository import AsyncRepository

__all__ = ["AsyncRepository"]
