"""Category management: tree building, tree navigation, the category form and listing."""

from jewelry_admin.categories.form import CategoryForm
from jewelry_admin.categories.listing import CategoryListing
from jewelry_admin.categories.slug import slugify
from jewelry_admin.categories.tree import build_category_tree, filter_category_tree, find_cycles
from jewelry_admin.categories.tree_view import CategoryTreeView, TreeRow

__all__ = [
    "CategoryForm",
    "CategoryListing",
    "CategoryTreeView",
    "TreeRow",
    "build_category_tree",
    "filter_category_tree",
    "find_cycles",
    "slugify",
]
