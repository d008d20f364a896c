"""Rack capability lookup.

Maps processing categories (filter, reverb, delay, ...) onto the modules of
a rack and decides whether a request can be satisfied at all.
"""

from patchrefine.rack.lib import (
    CATEGORIES,
    Feasibility,
    ModuleCategory,
    find_category_modules,
    get_category,
    is_impossible_request,
    resolve_target,
)

__all__ = [
    "CATEGORIES",
    "Feasibility",
    "ModuleCategory",
    "find_category_modules",
    "get_category",
    "is_impossible_request",
    "resolve_target",
]
