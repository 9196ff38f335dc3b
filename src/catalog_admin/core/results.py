"""Action results returned by the console stores.

Remote failures are reported as failed results rather than raised, so a UI
can show the message and keep its current state.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from catalog_admin.errors import CatalogError

T = TypeVar("T")


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    """Outcome of a user-initiated action."""

    ok: bool
    value: T | None = None
    message: str | None = None
    error: CatalogError | None = None

    @classmethod
    def success(cls, value: T | None = None, message: str | None = None) -> "ActionResult[T]":
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failure(cls, error: CatalogError) -> "ActionResult[T]":
        return cls(ok=False, message=error.message, error=error)

    @classmethod
    def stale(cls) -> "ActionResult[T]":
        """Result of an action superseded by a newer one before it completed."""
        return cls(ok=True, message="superseded")
