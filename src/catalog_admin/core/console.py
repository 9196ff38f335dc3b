"""Console session.

Wires one navigation store, one draft controller and one deletion
coordinator over a single catalog client, and performs the refreshes that
follow a content submission.
"""

import logging

from catalog_admin.catalog import CatalogClient
from catalog_admin.core.deletion import DeletionCoordinator
from catalog_admin.core.drafts import DraftController
from catalog_admin.core.models import ContentAttachResult
from catalog_admin.core.navigation import NavigationStore
from catalog_admin.core.results import ActionResult
from catalog_admin.core.views import ConsoleView, build_console_view

logger = logging.getLogger(__name__)


class CatalogConsole:
    """Console state for a single UI surface."""

    def __init__(self, gateway: CatalogClient) -> None:
        self.gateway = gateway
        self.navigation = NavigationStore(gateway)
        self.drafts = DraftController(gateway)
        self.deletion = DeletionCoordinator(gateway, self.navigation)

    async def load(self) -> ActionResult:
        """Load the top-level list for a fresh console."""
        return await self.navigation.refresh_top_level()

    async def submit_draft(self) -> ActionResult[ContentAttachResult]:
        """Submit the open draft and refresh the list the leaf is shown in.

        The returned content is merged into the local copy of the leaf so
        its badges update even before the refresh lands. The sibling list is
        reloaded only if the user is still on the view the submit started
        from.
        """
        draft = self.drafts.draft
        view = self.navigation.view_ticket()
        result = await self.drafts.submit()
        if not result.ok or draft is None or result.value is None:
            return result

        leaf = draft.target.with_content(result.value.content)
        self.navigation.replace_category(leaf)

        if leaf.parent_id is not None:
            if not self.navigation.is_current(view):
                logger.debug(f"Skipping refresh of {leaf.parent_id}: view changed during submit")
                return result
            refreshed = await self.navigation.show_children_of(leaf.parent_id)
        else:
            refreshed = await self.navigation.refresh_top_level()
        if not refreshed.ok:
            logger.warning(f"Refresh after submit failed: {refreshed.message}")
        return result

    def view(self) -> ConsoleView:
        return build_console_view(self.navigation, self.drafts, self.deletion)
