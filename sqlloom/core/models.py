"""Domain models for queries, test templates and their index."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import ClassVar, Iterator

from pydantic import BaseModel, ConfigDict, Field

from .errors import DuplicateQueryId, UnknownQueryId


class Placeholder(str, Enum):
    """How a rendered query is threaded into its test templates."""

    POSARGS = "posargs"
    VARIABLES = "variables"


class QueryTemplate(BaseModel):
    """A declared query template and the conditions it understands."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Resolved template path")
    all_conds: tuple[str, ...] = Field(default=(), description="Known conditions")


class Query(BaseModel):
    """A query to render from a template with a set of guard conditions."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique query id")
    template: Path = Field(..., description="Resolved template path")
    conds: tuple[str, ...] = Field(default=(), description="Enabled conditions")
    output: Path | None = Field(default=None, description="Resolved output path")


class TestTemplate(BaseModel):
    """A test template bound to one query."""

    __test__: ClassVar[bool] = False

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Resolved template path")
    output: Path = Field(..., description="Resolved output path")
    query_id: str = Field(..., description="Id of the query under test")


class Queries:
    """Queries in manifest order, addressable by position or by id."""

    def __init__(self) -> None:
        self._items: list[Query] = []
        self._index: dict[str, int] = {}

    def add(self, query: Query) -> int:
        if query.id in self._index:
            raise DuplicateQueryId(query.id)
        self._items.append(query)
        self._index[query.id] = len(self._items) - 1
        return self._index[query.id]

    def index_of(self, query_id: str) -> int:
        try:
            return self._index[query_id]
        except KeyError:
            raise UnknownQueryId(query_id) from None

    def get(self, query_id: str) -> Query:
        return self._items[self.index_of(query_id)]

    def __getitem__(self, index: int) -> Query:
        return self._items[index]

    def __contains__(self, query_id: object) -> bool:
        return query_id in self._index

    def __iter__(self) -> Iterator[Query]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


class TestTemplates:
    """Test templates in manifest order, indexed by the query they test."""

    __test__ = False

    def __init__(self) -> None:
        self._items: list[TestTemplate] = []
        self._by_query: dict[str, list[int]] = {}

    def add(self, test_template: TestTemplate) -> int:
        self._items.append(test_template)
        index = len(self._items) - 1
        self._by_query.setdefault(test_template.query_id, []).append(index)
        return index

    def find_by_query(self, query_id: str) -> list[TestTemplate]:
        return [self._items[i] for i in self._by_query.get(query_id, [])]

    def __getitem__(self, index: int) -> TestTemplate:
        return self._items[index]

    def __iter__(self) -> Iterator[TestTemplate]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
