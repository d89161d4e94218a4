"""Category listing screen: server-side filters, delete, status toggle, CSV export."""

import csv
import io
from datetime import date
from typing import List, Optional

import structlog

from jewelry_admin.core.exceptions import JewelryAdminException
from jewelry_admin.core.notifications import Notifier
from jewelry_admin.schemas import CategoryRecord
from jewelry_admin.services.category_api import CategoryApi

logger = structlog.get_logger(__name__)

CSV_HEADER = ["Name", "Slug", "Status", "Products", "Featured", "Display Order"]


class CategoryListing:
    """Flat, filterable category table."""

    def __init__(self, api: CategoryApi, notifier: Optional[Notifier] = None):
        self.api = api
        self.notifier = notifier or Notifier()

        self.categories: List[CategoryRecord] = []
        self.search_term = ""
        self.status_filter = "all"
        self.featured_filter = "all"
        self.loading = False
        self.deleting_id: Optional[str] = None
        self.toggling_status_id: Optional[str] = None

    async def refresh(self) -> None:
        """Refetch with the current filters; a failed fetch shows an empty table."""
        self.loading = True
        try:
            self.categories = await self.api.list_categories(
                search=self.search_term or None,
                status=self.status_filter,
                featured=self.featured_filter,
            )
        except JewelryAdminException as e:
            logger.error("category_list_fetch_failed", error=e.message)
            self.categories = []
        finally:
            self.loading = False

    async def set_filters(
        self,
        search_term: Optional[str] = None,
        status_filter: Optional[str] = None,
        featured_filter: Optional[str] = None,
    ) -> None:
        if search_term is not None:
            self.search_term = search_term
        if status_filter is not None:
            self.status_filter = status_filter
        if featured_filter is not None:
            self.featured_filter = featured_filter
        await self.refresh()

    async def delete(self, category_id: str) -> bool:
        self.deleting_id = category_id
        try:
            await self.api.delete_category(category_id)
        except JewelryAdminException as e:
            logger.error("category_delete_failed", category_id=category_id, error=e.message)
            self.notifier.error("Failed to delete category")
            return False
        finally:
            self.deleting_id = None

        self.notifier.success("Category deleted successfully")
        await self.refresh()
        return True

    async def toggle_status(self, category_id: str) -> bool:
        category = next((c for c in self.categories if c.id == category_id), None)
        if category is None:
            logger.warning("category_toggle_unknown", category_id=category_id)
            return False

        new_status = "inactive" if category.status == "active" else "active"
        self.toggling_status_id = category_id
        try:
            await self.api.update_category(category_id, {"status": new_status})
        except JewelryAdminException as e:
            logger.error("category_status_toggle_failed", category_id=category_id, error=e.message)
            self.notifier.error("Failed to update category status")
            return False
        finally:
            self.toggling_status_id = None

        verb = "activated" if new_status == "active" else "deactivated"
        self.notifier.success(f"Category {verb} successfully")
        await self.refresh()
        return True

    def export_csv(self) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for category in self.categories:
            writer.writerow([
                category.name,
                category.slug,
                category.status,
                category.product_count or 0,
                "Yes" if category.featured else "No",
                category.display_order,
            ])
        return buffer.getvalue()

    @staticmethod
    def export_filename(today: Optional[date] = None) -> str:
        today = today or date.today()
        return f"categories-{today.isoformat()}.csv"
