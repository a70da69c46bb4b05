"""
Translation of criteria trees into plain MongoDB query filters.

Used when TEST_MODE is on and Atlas Search is unavailable: text matching
falls back to case-insensitive substring regexes, so there is no
relevance score and fuzzy matching is not typo-tolerant.
"""
import re
from typing import Any, Dict, List, Sequence, Tuple

from pymongo import ASCENDING, DESCENDING

from models.criteria import (
    BooleanGroup, ExactMatch, Mode, Node, PrefixMatch, RangeMatch, SortDirection,
    SortKey, TextMatch, base_field,
)
from services.atlas_query import bson_value

# Filter that no document satisfies, for an ANY group without alternatives
MATCH_NOTHING = {"_id": {"$exists": False}}


def regex(pattern: str) -> Dict[str, Any]:
    return {"$regex": pattern, "$options": "i"}


def range_filter(node: RangeMatch) -> Dict[str, Any]:
    bounds: Dict[str, Any] = {}
    if node.min is not None:
        bounds["$gt" if node.exclusive_min else "$gte"] = bson_value(node.min)
    if node.max is not None:
        bounds["$lt" if node.exclusive_max else "$lte"] = bson_value(node.max)
    return {base_field(node.field): bounds} if bounds else {}


def group_filter(node: BooleanGroup) -> Dict[str, Any]:
    parts: List[Dict[str, Any]] = [to_filter(child) for child in node.children]

    if node.mode == Mode.ALL:
        parts = [part for part in parts if part]
        if not parts:
            return {}
        return parts[0] if len(parts) == 1 else {"$and": parts}

    if node.mode == Mode.ANY:
        if not parts:
            return MATCH_NOTHING
        # TODO: minimum_match above 1 needs an $expr count; only 1 is supported here
        return {"$or": parts}

    if not parts:
        return {}
    return {"$nor": parts}


def to_filter(node: Node) -> Dict[str, Any]:
    """MongoDB filter document for a criteria node"""
    if isinstance(node, BooleanGroup):
        return group_filter(node)
    if isinstance(node, TextMatch):
        return {base_field(node.field): regex(re.escape(node.value))}
    if isinstance(node, ExactMatch):
        return {base_field(node.field): bson_value(node.value)}
    if isinstance(node, RangeMatch):
        return range_filter(node)
    if isinstance(node, PrefixMatch):
        return {base_field(node.field): regex("^" + re.escape(node.value))}
    raise TypeError(f"Unsupported criteria node: {type(node).__name__}")


def to_sort(sort: Sequence[SortKey]) -> List[Tuple[str, int]]:
    """Sort specification for find(); relevance keys have no local equivalent and are dropped"""
    return [
        (base_field(key.field), ASCENDING if key.direction == SortDirection.ASC else DESCENDING)
        for key in sort
        if not key.is_relevance
    ]
