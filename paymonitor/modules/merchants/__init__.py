"""Merchant identifier resolution."""

from .exceptions import MerchantError, UnknownMerchantError
from .repository import MerchantRepository

__all__ = ["MerchantError", "MerchantRepository", "UnknownMerchantError"]
