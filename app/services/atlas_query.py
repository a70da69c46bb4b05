"""
Translation of criteria trees into MongoDB Atlas Search ($search) stages.

Text nodes become `text` operators, exact nodes `equals`, ranges `range`
and prefixes `autocomplete`. Inside an ALL group, exact and range nodes
go to `filter` so they do not affect the relevance score.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from models.criteria import (
    BooleanGroup, ExactMatch, Mode, Node, PrefixMatch, RangeMatch, SearchQuery,
    SortDirection, SortKey, TextMatch, base_field,
)


def bson_value(value: Any) -> Any:
    # decimal.Decimal is not BSON-encodable; prices are stored as doubles
    if isinstance(value, Decimal):
        return float(value)
    return value


def fuzzy_max_edits(term: str) -> int:
    """Edit distance allowed for a fuzzy term, scaled by its length (Atlas allows 1 or 2)"""
    return 1 if len(term) <= 5 else 2


def text_operator(node: TextMatch) -> Dict[str, Any]:
    operator: Dict[str, Any] = {"query": node.value, "path": base_field(node.field)}
    if node.fuzzy:
        operator["fuzzy"] = {"maxEdits": fuzzy_max_edits(node.value)}
    if node.boost is not None:
        operator["score"] = {"boost": {"value": node.boost}}
    return {"text": operator}


def range_operator(node: RangeMatch) -> Dict[str, Any]:
    operator: Dict[str, Any] = {"path": base_field(node.field)}
    if node.min is not None:
        operator["gt" if node.exclusive_min else "gte"] = bson_value(node.min)
    if node.max is not None:
        operator["lt" if node.exclusive_max else "lte"] = bson_value(node.max)
    return {"range": operator}


def compound_operator(node: BooleanGroup) -> Dict[str, Any]:
    clauses: Dict[str, List[Dict[str, Any]]] = {}

    def add(clause: str, child: Node) -> None:
        clauses.setdefault(clause, []).append(to_operator(child))

    if node.mode == Mode.ALL:
        for child in node.children:
            if isinstance(child, (ExactMatch, RangeMatch)):
                add("filter", child)
            elif isinstance(child, BooleanGroup) and child.mode == Mode.NONE:
                for excluded in child.children:
                    add("mustNot", excluded)
            else:
                add("must", child)
    elif node.mode == Mode.ANY:
        for child in node.children:
            add("should", child)
    else:
        for child in node.children:
            add("mustNot", child)

    compound: Dict[str, Any] = dict(clauses)
    if node.mode == Mode.ANY and node.children:
        compound["minimumShouldMatch"] = node.minimum_match or 1
    return {"compound": compound}


def to_operator(node: Node) -> Dict[str, Any]:
    """Atlas Search operator for a single criteria node"""
    if isinstance(node, BooleanGroup):
        return compound_operator(node)
    if isinstance(node, TextMatch):
        return text_operator(node)
    if isinstance(node, ExactMatch):
        return {"equals": {"path": base_field(node.field), "value": bson_value(node.value)}}
    if isinstance(node, RangeMatch):
        return range_operator(node)
    if isinstance(node, PrefixMatch):
        return {"autocomplete": {"query": node.value, "path": base_field(node.field)}}
    raise TypeError(f"Unsupported criteria node: {type(node).__name__}")


def to_sort(sort: Sequence[SortKey]) -> Dict[str, int]:
    """
    $search sort document. Relevance keys are left out since Atlas
    already orders by descending score when no sort is given.
    """
    return {
        base_field(key.field): 1 if key.direction == SortDirection.ASC else -1
        for key in sort
        if not key.is_relevance
    }


def to_search_stage(query: SearchQuery, index_name: str) -> Dict[str, Any]:
    stage: Dict[str, Any] = {"index": index_name}
    stage.update(to_operator(query.criteria))
    # lowerBound counts are exact up to 1000 hits and approximate beyond
    stage["count"] = {"type": "lowerBound"}
    sort = to_sort(query.sort)
    if sort:
        stage["sort"] = sort
    return {"$search": stage}


def build_pipeline(query: SearchQuery, index_name: str, skip: int = 0, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Aggregation pipeline for one search.

    With a limit the pipeline returns a single document holding the page
    under "docs" and the search metadata (hit count) under "meta". Without
    one it streams every hit as its own document, since a $facet output
    document is capped at 16MB.
    """
    if limit is None:
        pipeline = [to_search_stage(query, index_name)]
        if skip:
            pipeline.append({"$skip": skip})
        return pipeline

    page_stages: List[Dict[str, Any]] = [{"$skip": skip}, {"$limit": limit}]

    return [
        to_search_stage(query, index_name),
        {
            "$facet": {
                "docs": page_stages,
                "meta": [{"$replaceWith": "$$SEARCH_META"}, {"$limit": 1}],
            }
        },
    ]
