"""Confirm-then-delete flow for categories.

After a successful delete the navigation store is reconciled: a deleted
selection is cleared and the list the category was shown in is reloaded,
unless the user moved to another view while the delete was in flight.
"""

import logging
from enum import Enum

from catalog_admin.catalog import CatalogClient
from catalog_admin.core.models import Category
from catalog_admin.core.navigation import NavigationStore
from catalog_admin.core.results import ActionResult
from catalog_admin.errors import CatalogError, ValidationError

logger = logging.getLogger(__name__)


class DeletionState(Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    DELETING = "deleting"


class DeletionCoordinator:
    """Confirmation and reconciliation around category deletes."""

    def __init__(self, gateway: CatalogClient, navigation: NavigationStore) -> None:
        self._gateway = gateway
        self._navigation = navigation
        self._state = DeletionState.IDLE
        self._target: Category | None = None
        self.error: str | None = None

    @property
    def state(self) -> DeletionState:
        return self._state

    @property
    def target(self) -> Category | None:
        return self._target

    @property
    def busy(self) -> bool:
        return self._state is DeletionState.DELETING

    def request_delete(self, target: Category) -> None:
        """Ask for confirmation before deleting target.

        Raises:
            ValidationError: If a delete is already running
        """
        if self._state is DeletionState.DELETING:
            raise ValidationError("A delete is already in progress")
        self._target = target
        self._state = DeletionState.CONFIRMING
        self.error = None

    def confirmation_prompt(self) -> str:
        if self._target is None:
            return ""
        return (
            f'Are you sure you want to delete "{self._target.name}"? This action '
            "cannot be undone and will remove all subcategories and content."
        )

    async def confirm(self) -> ActionResult[Category]:
        """Delete the pending target and reconcile navigation state.

        Raises:
            ValidationError: If no delete is awaiting confirmation
        """
        if self._state is not DeletionState.CONFIRMING or self._target is None:
            raise ValidationError("No delete is awaiting confirmation")

        target = self._target
        view = self._navigation.view_ticket()
        self._state = DeletionState.DELETING
        try:
            await self._gateway.delete_category(target.id)
        except CatalogError as e:
            logger.warning(f"Delete of {target.id} failed: {e.message}")
            self.error = e.message
            return ActionResult.failure(e)
        finally:
            self._state = DeletionState.IDLE
            self._target = None

        logger.info(f"Deleted category {target.id}")
        navigation = self._navigation
        in_view = navigation.is_current(view)
        if navigation.selected_id == target.id:
            navigation.clear_selection()
        navigation.forget(target.id)

        if target.parent_id is not None:
            if in_view:
                refreshed = await navigation.show_children_of(target.parent_id)
            else:
                logger.debug(f"Skipping refresh of {target.parent_id}: view changed during delete")
                refreshed = ActionResult.stale()
        else:
            if in_view:
                navigation.clear_children()
            refreshed = await navigation.refresh_top_level()

        message = f"{target.name} deleted successfully"
        if not refreshed.ok:
            return ActionResult(ok=True, value=target, message=message, error=refreshed.error)
        return ActionResult.success(target, message)

    def cancel(self) -> None:
        """Drop the pending target without deleting anything."""
        if self._state is DeletionState.DELETING:
            raise ValidationError("A delete is already in progress")
        self._target = None
        self._state = DeletionState.IDLE
