# model/errors.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class StorefrontError(Exception):
    """Base class for storefront failures."""


class PersistenceError(StorefrontError):
    """Raised by the database layer when a write could not be committed."""


class OrderError(str, Enum):
    NOT_AUTHENTICATED = "You must be logged in to place an order."
    PERSISTENCE_FAILED = "Failed to place order. Please try again."


@dataclass(frozen=True)
class OrderResult:
    order_id: Optional[str] = None
    error: Optional[OrderError] = None

    @property
    def ok(self):
        return self.error is None and self.order_id is not None

    @classmethod
    def success(cls, order_id):
        return cls(order_id=order_id)

    @classmethod
    def failure(cls, error):
        return cls(error=error)
