"""Change detection against the last accepted snapshot.

Records are compared as whole documents through ``canonical()``: a
stable, key-sorted JSON rendering of the camelCase document with the
store's bookkeeping fields removed. There is no field-level diff.

Snapshots only move forward through ``accept()``, which callers invoke
after the corresponding write succeeded. A failed write therefore leaves
the record "changed" and it is retried on the next pass.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Iterable

from pydantic import BaseModel

# Fields added by the store itself, never part of record identity
STORE_FIELDS = frozenset(
    {"_id", "_creationTime", "createdAt", "updatedAt", "created_at", "updated_at"}
)


def _as_document(record: BaseModel | dict[str, Any]) -> dict[str, Any]:
    if isinstance(record, BaseModel):
        return record.model_dump(mode="json", by_alias=True)
    return dict(record)


def _strip(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _strip(v) for k, v in value.items() if k not in STORE_FIELDS}
    if isinstance(value, list):
        return [_strip(v) for v in value]
    return value


def canonical(record: BaseModel | dict[str, Any]) -> str:
    """Stable JSON string used for equality checks."""
    return json.dumps(
        _strip(_as_document(record)),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def _record_id(record: BaseModel | dict[str, Any]) -> str:
    if isinstance(record, BaseModel):
        return str(getattr(record, "id"))
    return str(record["id"])


class Snapshot:
    """Last accepted rendering of a single entity."""

    def __init__(self) -> None:
        self._value: str | None = None

    @property
    def empty(self) -> bool:
        return self._value is None

    def has_changed(self, record) -> bool:
        """True when there is no snapshot yet or the record differs."""
        return self._value is None or canonical(record) != self._value

    def accept(self, record) -> None:
        self._value = canonical(record)

    def clear(self) -> None:
        self._value = None


@dataclass
class ChangeSet:
    """Records split by comparison with a batch snapshot."""

    changed: list = field(default_factory=list)
    unchanged: list = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.changed) + len(self.unchanged)


class BatchSnapshot:
    """Id-keyed snapshots for a batch of records, in arrival order."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._values

    def has_changed(self, records: Iterable) -> bool:
        """Compare the whole batch, order included, with the snapshot."""
        fresh = [(_record_id(r), canonical(r)) for r in records]
        return fresh != list(self._values.items())

    def is_changed(self, record) -> bool:
        """Compare a single record with its id's snapshot."""
        return self._values.get(_record_id(record)) != canonical(record)

    def classify(self, records: Iterable) -> ChangeSet:
        result = ChangeSet()
        for record in records:
            if self.is_changed(record):
                result.changed.append(record)
            else:
                result.unchanged.append(record)
        return result

    def accept(self, records: Iterable) -> None:
        """Advance the snapshot for each given record."""
        for record in records:
            self.accept_one(record)

    def accept_one(self, record) -> None:
        self._values[_record_id(record)] = canonical(record)

    def replace(self, records: Iterable) -> None:
        """Reset the snapshot to exactly this batch, in this order."""
        self._values = {_record_id(r): canonical(r) for r in records}

    def clear(self) -> None:
        self._values.clear()
