"""
Backend-agnostic query description.

A search request is a tree of predicate nodes combined by BooleanGroup
nodes, plus an ordered list of sort keys. The tree is translated into
Atlas Search operators (services.atlas_query) or into a plain MongoDB
filter (services.mongo_query) right before execution.
"""
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Iterator, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

KEYWORD_SUFFIX = ".keyword"
RELEVANCE = "_score"

Number = Union[int, float, Decimal]


def keyword_field(field: str) -> str:
    """Path of the untokenized (exact) form of a field"""
    return f"{field}{KEYWORD_SUFFIX}"


def base_field(path: str) -> str:
    """Document field a path refers to, with any keyword suffix removed"""
    if path.endswith(KEYWORD_SUFFIX):
        return path[:-len(KEYWORD_SUFFIX)]
    return path


def is_keyword(path: str) -> bool:
    return path.endswith(KEYWORD_SUFFIX)


class Mode(str, Enum):
    ALL = "all"    # must
    ANY = "any"    # should
    NONE = "none"  # must not


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    def fields(self) -> Iterator[str]:
        """Every document field referenced by this node"""
        yield base_field(self.field)


class TextMatch(Node):
    """Analyzed full-text match; contributes to the relevance score"""
    kind: Literal["text"] = "text"
    field: str
    value: str
    boost: Optional[float] = None
    fuzzy: bool = False


class ExactMatch(Node):
    """Exact-term filter; no scoring impact"""
    kind: Literal["exact"] = "exact"
    field: str
    value: Any


class RangeMatch(Node):
    """Numeric/date bounds; either side may be open"""
    kind: Literal["range"] = "range"
    field: str
    min: Optional[Number] = None
    max: Optional[Number] = None
    exclusive_min: bool = False
    exclusive_max: bool = False


class PrefixMatch(Node):
    """Type-ahead match on the beginning of a field value"""
    kind: Literal["prefix"] = "prefix"
    field: str
    value: str


class BooleanGroup(Node):
    kind: Literal["group"] = "group"
    mode: Mode
    children: Tuple["Criterion", ...] = ()
    minimum_match: Optional[int] = None

    def fields(self) -> Iterator[str]:
        for child in self.children:
            yield from child.fields()

    def nodes(self) -> Iterator[Node]:
        """Depth-first walk over all descendant nodes"""
        for child in self.children:
            yield child
            if isinstance(child, BooleanGroup):
                yield from child.nodes()


Criterion = Annotated[
    Union[TextMatch, ExactMatch, RangeMatch, PrefixMatch, BooleanGroup],
    Field(discriminator="kind"),
]

BooleanGroup.model_rebuild()


def all_of(*children: Node) -> BooleanGroup:
    return BooleanGroup(mode=Mode.ALL, children=children)


def any_of(*children: Node, minimum_match: Optional[int] = 1) -> BooleanGroup:
    return BooleanGroup(mode=Mode.ANY, children=children, minimum_match=minimum_match)


def none_of(*children: Node) -> BooleanGroup:
    return BooleanGroup(mode=Mode.NONE, children=children)


class SortKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    direction: SortDirection = SortDirection.DESC

    @classmethod
    def relevance(cls) -> "SortKey":
        return cls(field=RELEVANCE, direction=SortDirection.DESC)

    @property
    def is_relevance(self) -> bool:
        return self.field == RELEVANCE


class SearchQuery(BaseModel):
    """Criteria tree plus ordered sort keys, ready for a search backend"""
    model_config = ConfigDict(frozen=True)

    criteria: BooleanGroup
    sort: Tuple[SortKey, ...] = (SortKey.relevance(),)
