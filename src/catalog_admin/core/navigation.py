"""Category tree navigation state.

Tracks the selected category, its visible children, the top-level list and
a back-navigation history. The history is a cache of visited nodes; the
parent_id links returned by the catalog store are the authoritative source
of ancestry, so going back degrades to following parents when the history
runs out.

Every action takes a ticket synchronously before its first await. Responses
are applied only while the ticket is current (no newer action started and
the selection still matches), so a late response never overwrites newer
state.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, replace

from catalog_admin.catalog import CatalogClient
from catalog_admin.core.models import Category
from catalog_admin.core.results import ActionResult
from catalog_admin.core.types import CategoryId
from catalog_admin.errors import CatalogError, InvalidTargetError, ValidationError

logger = logging.getLogger(__name__)


class NavigationStack:
    """LIFO history of visited categories, most recent last."""

    def __init__(self) -> None:
        self._stack: list[Category] = []

    def push(self, category: Category) -> None:
        """Push a category onto the history."""
        self._stack.append(category)

    def pop(self) -> Category | None:
        """Pop and return the most recent category, or None if empty."""
        if self._stack:
            return self._stack.pop()
        return None

    def clear(self) -> None:
        """Clear all navigation history."""
        self._stack.clear()

    def contains(self, category_id: CategoryId) -> bool:
        return any(entry.id == category_id for entry in self._stack)

    def truncate_to(self, category_id: CategoryId) -> None:
        """Drop the entry for category_id and everything visited after it."""
        for index, entry in enumerate(self._stack):
            if entry.id == category_id:
                del self._stack[index:]
                return

    def forget(self, category_id: CategoryId) -> None:
        """Remove every entry for category_id."""
        self._stack = [entry for entry in self._stack if entry.id != category_id]

    def is_empty(self) -> bool:
        """Check if the navigation history is empty."""
        return len(self._stack) == 0

    def __iter__(self) -> Iterator[Category]:
        return iter(list(self._stack))

    def __len__(self) -> int:
        return len(self._stack)


@dataclass(frozen=True)
class ViewTicket:
    """Identity of a view: the latest action sequence number and selection."""

    seq: int
    selection: CategoryId | None


class NavigationStore:
    """Navigation state for one console surface."""

    def __init__(self, gateway: CatalogClient) -> None:
        self._gateway = gateway
        self.selected: Category | None = None
        self.children: list[Category] = []
        self.top_level: list[Category] = []
        self.stack = NavigationStack()
        self.error: str | None = None
        self._seq = 0
        self._top_level_seq = 0
        self._pending = 0

    @property
    def busy(self) -> bool:
        """True while any action is waiting on the catalog store."""
        return self._pending > 0

    @property
    def selected_id(self) -> CategoryId | None:
        return self.selected.id if self.selected else None

    def find_visible(self, category_id: CategoryId) -> Category | None:
        """Find a category in the selection, children or top-level list."""
        if self.selected and self.selected.id == category_id:
            return self.selected
        for category in (*self.children, *self.top_level):
            if category.id == category_id:
                return category
        return None

    async def enter(self, node: Category) -> ActionResult[list[Category]]:
        """Open a category and load its children.

        The previous selection is pushed onto the history. Entering a node
        already in the history rewinds the history to before it, so the
        history never holds the selected node.
        """
        if self.selected is not None and self.selected.id != node.id:
            if self.stack.contains(node.id):
                self.stack.truncate_to(node.id)
            else:
                self.stack.push(self.selected)
        self.selected = node
        self.error = None

        ticket = self._begin()
        try:
            return await self._load_children(ticket, node.id)
        finally:
            self._finish()

    async def go_back(self) -> ActionResult[Category]:
        """Navigate to the previously visited category or the parent.

        Uses the history when available, reconstructs ancestry through
        parent_id when the history is empty, and falls back to the top-level
        view when the selection has no parent.
        """
        self.error = None
        prev = self.stack.pop()
        if prev is not None:
            if prev.parent_id is None:
                self.stack.clear()
            self.selected = prev
            ticket = self._begin()
            try:
                result = await self._restore_view(ticket, prev)
            finally:
                self._finish()
            return _with_value(result, prev)

        if self.selected is not None and self.selected.parent_id is not None:
            ticket = self._begin()
            try:
                return await self._back_to_parent(ticket, self.selected.parent_id)
            finally:
                self._finish()

        self.selected = None
        self.children = []
        self._begin()
        try:
            result = await self.refresh_top_level()
        finally:
            self._finish()
        return _with_value(result, None)

    async def add_category(self, name: str, as_leaf: bool) -> ActionResult[Category]:
        """Create a category under the selection, or at top level.

        A leaf created with nothing selected is entered immediately so it can
        be filled with content. The result is successful once the store has
        created the category; a failed list reload is reported in
        result.error and self.error.

        Raises:
            ValidationError: If name is blank
            InvalidTargetError: If the selection is a leaf category
        """
        if not name.strip():
            raise ValidationError("Category name must not be empty")
        parent = self.selected
        if parent is not None and parent.is_leaf:
            raise InvalidTargetError(f'Content category "{parent.name}" cannot have children')
        self.error = None

        ticket = self._begin()
        try:
            try:
                created = await self._gateway.create_category(
                    name,
                    as_leaf,
                    parent.id if parent else None,
                )
            except CatalogError as e:
                return self._fail(e)

            if parent is not None:
                refreshes = [await self._load_children(ticket, parent.id)]
            else:
                refreshes = []
                if as_leaf and self.is_current(ticket):
                    refreshes.append(await self.enter(created))
                refreshes.append(await self.refresh_top_level())
        finally:
            self._finish()

        message = f"{name} added successfully"
        failed = next((r for r in refreshes if not r.ok), None)
        if failed is not None:
            self.error = failed.message
            return ActionResult(ok=True, value=created, message=message, error=failed.error)
        return ActionResult.success(created, message)

    async def refresh_top_level(self) -> ActionResult[list[Category]]:
        """Reload the top-level category list."""
        self._top_level_seq += 1
        seq = self._top_level_seq
        self._pending += 1
        try:
            categories = await self._gateway.list_top_level()
        except CatalogError as e:
            return self._fail(e)
        finally:
            self._pending -= 1

        if seq != self._top_level_seq:
            logger.debug("Dropping stale top-level listing")
            return ActionResult.stale()
        self.top_level = categories
        return ActionResult.success(categories)

    async def show_children_of(self, parent_id: CategoryId) -> ActionResult[list[Category]]:
        """Replace the visible children with the children of parent_id."""
        ticket = self._begin()
        try:
            return await self._load_children(ticket, parent_id)
        finally:
            self._finish()

    def clear_selection(self) -> None:
        self.selected = None

    def clear_children(self) -> None:
        self.children = []

    def forget(self, category_id: CategoryId) -> None:
        """Remove a deleted category from the history and visible lists."""
        self.stack.forget(category_id)
        self.children = [c for c in self.children if c.id != category_id]
        self.top_level = [c for c in self.top_level if c.id != category_id]

    def replace_category(self, category: Category) -> None:
        """Swap in an updated copy of a category wherever it is shown."""
        if self.selected and self.selected.id == category.id:
            self.selected = category
        self.children = [category if c.id == category.id else c for c in self.children]
        self.top_level = [category if c.id == category.id else c for c in self.top_level]

    async def _back_to_parent(self, ticket: ViewTicket, parent_id: CategoryId) -> ActionResult[Category]:
        try:
            parent = await self._gateway.get_category(parent_id)
        except CatalogError as e:
            return self._fail(e)

        if not self.is_current(ticket):
            logger.debug(f"Dropping stale parent lookup for {parent_id}")
            return ActionResult.stale()

        self.selected = parent
        result = await self._restore_view(replace(ticket, selection=parent.id), parent)
        return _with_value(result, parent)

    async def _restore_view(self, ticket: ViewTicket, node: Category) -> ActionResult[list[Category]]:
        """Show the view a node was reached from.

        A nested node shows its siblings; a top-level node shows its own
        children and the top-level list is reloaded.
        """
        if node.parent_id is not None:
            return await self._load_children(ticket, node.parent_id)

        result = await self._load_children(ticket, node.id)
        top_level = await self.refresh_top_level()
        return result if not result.ok else top_level

    async def _load_children(self, ticket: ViewTicket, parent_id: CategoryId) -> ActionResult[list[Category]]:
        try:
            children = await self._gateway.list_children(parent_id)
        except CatalogError as e:
            return self._fail(e)

        if not self.is_current(ticket):
            logger.debug(f"Dropping stale children of {parent_id}")
            return ActionResult.stale()
        self.children = children
        return ActionResult.success(children)

    def _begin(self) -> ViewTicket:
        self._seq += 1
        self._pending += 1
        return ViewTicket(seq=self._seq, selection=self.selected_id)

    def _finish(self) -> None:
        self._pending -= 1

    def view_ticket(self) -> ViewTicket:
        """Capture the current view without starting an action.

        Work that finishes later (a content submit, a delete) checks the
        ticket with is_current() before touching the visible lists.
        """
        return ViewTicket(seq=self._seq, selection=self.selected_id)

    def is_current(self, ticket: ViewTicket) -> bool:
        """True if no newer action started and the selection is unchanged."""
        return ticket.seq == self._seq and ticket.selection == self.selected_id

    def _fail(self, error: CatalogError) -> ActionResult:
        logger.warning(f"Navigation action failed: {error.message}")
        self.error = error.message
        return ActionResult.failure(error)


def _with_value(result: ActionResult, value: Category | None) -> ActionResult[Category]:
    return ActionResult(ok=result.ok, value=value, message=result.message, error=result.error)
