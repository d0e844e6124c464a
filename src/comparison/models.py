"""Value types for index snapshots and comparison results."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

KeyDirection = Union[int, float, str]


@dataclass(frozen=True, order=True)
class IndexIdentity:
    """Unique key of one index within one database: (collection, index name).

    Structural equality and hashing over both parts, so names containing any
    separator sequence never collide.
    """

    collection: str
    index_name: str

    def __str__(self) -> str:
        return f"{self.collection}::{self.index_name}"


def _normalize_direction(value: Any) -> KeyDirection:
    # Some servers report 1.0 / -1.0 for ascending/descending keys.
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str):
        return value
    return str(value)


@dataclass(frozen=True)
class IndexDefinition:
    """Ordered key shape of an index, e.g. (("email", 1),) or (("loc", "2dsphere"),)."""

    keys: tuple[tuple[str, KeyDirection], ...]

    @classmethod
    def from_key(cls, key: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> "IndexDefinition":
        """Build a definition from a key document, preserving field order."""
        items = key.items() if isinstance(key, Mapping) else key
        return cls(tuple((str(field), _normalize_direction(direction)) for field, direction in items))

    def as_dict(self) -> dict[str, KeyDirection]:
        return dict(self.keys)

    def __str__(self) -> str:
        inner = ", ".join(f"{field}: {direction!r}" for field, direction in self.keys)
        return "{" + inner + "}"


class IndexSnapshot(Mapping[IndexIdentity, IndexDefinition]):
    """Immutable index inventory of one database at one point in time."""

    def __init__(
        self,
        entries: Mapping[IndexIdentity, IndexDefinition] | None = None,
        collections: Iterable[str] | None = None,
        label: str = "",
    ):
        entries = dict(entries or {})
        self._entries = MappingProxyType(entries)
        names = set(collections or ())
        names.update(identity.collection for identity in entries)
        self._collections = frozenset(names)
        self.label = label

    @classmethod
    def from_indexes(
        cls,
        indexes: Mapping[str, Mapping[str, Mapping[str, Any]]],
        label: str = "",
    ) -> "IndexSnapshot":
        """Build a snapshot from {collection: {index_name: key_document}}."""
        entries = {
            IndexIdentity(collection, name): IndexDefinition.from_key(key)
            for collection, by_name in indexes.items()
            for name, key in by_name.items()
        }
        return cls(entries, collections=indexes.keys(), label=label)

    @property
    def collections(self) -> frozenset[str]:
        """Names of every collection enumerated, including ones without indexes."""
        return self._collections

    def __getitem__(self, identity: IndexIdentity) -> IndexDefinition:
        return self._entries[identity]

    def __iter__(self) -> Iterator[IndexIdentity]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"IndexSnapshot(label={self.label!r}, indexes={len(self)}, collections={len(self._collections)})"


class MissingIndexRecord(BaseModel):
    """An index found on one side only."""

    model_config = ConfigDict(frozen=True)

    collection: str = Field(..., description="Collection name")
    index_name: str = Field(..., description="Index name")
    index_value: dict[str, KeyDirection] = Field(..., description="Index key shape")

    @classmethod
    def from_entry(cls, identity: IndexIdentity, definition: IndexDefinition) -> "MissingIndexRecord":
        return cls(
            collection=identity.collection,
            index_name=identity.index_name,
            index_value=definition.as_dict(),
        )

    @property
    def identity(self) -> IndexIdentity:
        return IndexIdentity(self.collection, self.index_name)


class DivergentIndexRecord(BaseModel):
    """An index present on both sides whose key shapes differ."""

    model_config = ConfigDict(frozen=True)

    collection: str
    index_name: str
    source_value: dict[str, KeyDirection]
    target_value: dict[str, KeyDirection]

    @property
    def identity(self) -> IndexIdentity:
        return IndexIdentity(self.collection, self.index_name)


def _by_identity(record: MissingIndexRecord | DivergentIndexRecord) -> tuple[str, str]:
    return (record.collection, record.index_name)


class IndexDiff(BaseModel):
    """Result of comparing two snapshots."""

    missing_in_source: list[MissingIndexRecord] = Field(default_factory=list)
    missing_in_target: list[MissingIndexRecord] = Field(default_factory=list)
    divergent: list[DivergentIndexRecord] = Field(default_factory=list)

    @property
    def has_differences(self) -> bool:
        return bool(self.missing_in_source or self.missing_in_target or self.divergent)

    def sorted(self) -> "IndexDiff":
        """Return a copy with every list ordered by (collection, index_name)."""
        return IndexDiff(
            missing_in_source=sorted(self.missing_in_source, key=_by_identity),
            missing_in_target=sorted(self.missing_in_target, key=_by_identity),
            divergent=sorted(self.divergent, key=_by_identity),
        )


class ComparisonReport(BaseModel):
    """Outcome of one comparison run."""

    diff: IndexDiff
    source_index_count: int = 0
    target_index_count: int = 0
    elapsed_ms: float = 0.0


__all__ = [
    "ComparisonReport",
    "DivergentIndexRecord",
    "IndexDefinition",
    "IndexDiff",
    "IndexIdentity",
    "IndexSnapshot",
    "KeyDirection",
    "MissingIndexRecord",
]
