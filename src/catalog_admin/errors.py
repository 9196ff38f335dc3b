"""Error taxonomy for catalog-admin.

Validation and invalid-target errors are raised locally before any network
call. Transport and remote errors come from the catalog gateway and are
surfaced by the console stores as failed action results.
"""


class CatalogError(Exception):
    """Base class for all catalog-admin errors."""

    @property
    def message(self) -> str:
        return str(self)


class TransportError(CatalogError):
    """Catalog store unreachable (connection failure, timeout)."""


class RemoteError(CatalogError):
    """Catalog store answered with a non-success status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ValidationError(CatalogError):
    """Client-side precondition violated."""


class InvalidTargetError(CatalogError):
    """Operation attempted against a category of the wrong kind."""
