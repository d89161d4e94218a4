"""Category tree navigator with search, expand/collapse and inline rename."""

from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional, Sequence, Set

import structlog

from jewelry_admin.categories.slug import slugify
from jewelry_admin.categories.tree import build_category_tree, filter_category_tree, find_node
from jewelry_admin.core.callbacks import invoke
from jewelry_admin.core.exceptions import CategoryCycleError, JewelryAdminException
from jewelry_admin.core.notifications import Notifier
from jewelry_admin.schemas import CategoryNode
from jewelry_admin.services.category_api import CategoryApi

logger = structlog.get_logger(__name__)


@dataclass
class TreeRow:
    """One visible line of the rendered tree."""

    node: CategoryNode
    level: int
    expanded: bool
    selected: bool
    editing: bool

    @property
    def has_children(self) -> bool:
        return bool(self.node.children)


class CategoryTreeView:
    """Headless state for the category tree panel.

    Holds the fetched forest plus the ephemeral UI state (search term,
    expanded ids, selection, the single node being renamed). Nothing here is
    persisted; refresh() always rebuilds the forest from scratch.
    """

    def __init__(
        self,
        api: CategoryApi,
        notifier: Optional[Notifier] = None,
        on_select: Optional[Callable[[str], Any]] = None,
        on_category_update: Optional[Callable[[], Any]] = None,
    ):
        self.api = api
        self.notifier = notifier or Notifier()
        self.on_select = on_select
        self.on_category_update = on_category_update

        self.categories: List[CategoryNode] = []
        self.search_term = ""
        self.expanded: Set[str] = set()
        self.selected_id: Optional[str] = None
        self.loading = False

        self.editing_id: Optional[str] = None
        self.edit_value = ""

    # ------------------------------------------------------------------
    # Loading and navigation
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        """Refetch every category and rebuild the tree."""
        self.loading = True
        try:
            records = await self.api.list_categories()
            self.categories = build_category_tree(records)
        except CategoryCycleError as e:
            self.categories = []
            self.notifier.error(e.message)
        except JewelryAdminException as e:
            # keep whatever was shown before
            logger.error("category_tree_fetch_failed", error=e.message)
        finally:
            self.loading = False

    def set_search_term(self, term: str) -> None:
        self.search_term = term

    @property
    def visible_categories(self) -> List[CategoryNode]:
        return filter_category_tree(self.categories, self.search_term)

    @property
    def is_empty(self) -> bool:
        """True when the panel should show 'No categories found'."""
        return not self.loading and not self.visible_categories

    def toggle_expand(self, category_id: str) -> None:
        if category_id in self.expanded:
            self.expanded.discard(category_id)
        else:
            self.expanded.add(category_id)

    async def select(self, category_id: str) -> None:
        # clicks on the row being renamed go to the editor, not the selection
        if category_id == self.editing_id:
            return
        self.selected_id = category_id
        await invoke(self.on_select, category_id)

    def visible_rows(self) -> List[TreeRow]:
        return list(self._rows(self.visible_categories, 0))

    def _rows(self, nodes: Sequence[CategoryNode], level: int) -> Iterator[TreeRow]:
        for node in nodes:
            expanded = node.id in self.expanded
            yield TreeRow(
                node=node,
                level=level,
                expanded=expanded,
                selected=node.id == self.selected_id,
                editing=node.id == self.editing_id,
            )
            if node.children and expanded:
                yield from self._rows(node.children, level + 1)

    # ------------------------------------------------------------------
    # Inline rename
    # ------------------------------------------------------------------

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    def start_edit(self, category_id: str) -> bool:
        """Enter editing for one node, dropping any uncommitted edit elsewhere."""
        node = find_node(self.categories, category_id)
        if node is None:
            logger.warning("category_edit_unknown_node", category_id=category_id)
            return False

        if self.editing_id and self.editing_id != category_id:
            logger.debug("category_edit_abandoned", category_id=self.editing_id)
        self.editing_id = category_id
        self.edit_value = node.name
        return True

    def set_edit_value(self, value: str) -> None:
        if self.editing_id is not None:
            self.edit_value = value

    def cancel_edit(self) -> None:
        self.editing_id = None
        self.edit_value = ""

    async def commit_edit(self) -> bool:
        """Save the staged name.

        Returns:
            True if the rename was saved; False if it was rejected or failed,
            in which case the node stays in editing state.
        """
        category_id = self.editing_id
        if category_id is None:
            return False

        name = self.edit_value.strip()
        if not name:
            self.notifier.error("Category name cannot be empty")
            return False

        slug = slugify(name)
        try:
            await self.api.update_category(category_id, {"name": name, "slug": slug})
        except JewelryAdminException as e:
            logger.error("category_rename_failed", category_id=category_id, error=e.message)
            self.notifier.error(e.message or "Failed to update category")
            return False

        logger.info("category_renamed", category_id=category_id, name=name, slug=slug)
        self.notifier.success("Category name updated")
        self.cancel_edit()
        await self.refresh()
        await invoke(self.on_category_update)
        return True

    async def handle_key(self, key: str) -> None:
        """Keyboard handling for the rename input."""
        if self.editing_id is None:
            return
        if key == "Enter":
            await self.commit_edit()
        elif key == "Escape":
            self.cancel_edit()
