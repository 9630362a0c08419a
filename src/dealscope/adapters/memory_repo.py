from typing import Iterable

from dealscope.domain.ports import PropertyStore, VerdictSink
from dealscope.domain.property import PropertyRecord
from dealscope.domain.underwriting import DealVerdict


class InMemoryPropertyStore(PropertyStore):
    def __init__(self, items: Iterable[PropertyRecord] = ()) -> None:
        self._items: dict[str, PropertyRecord] = {}
        self.upsert_many(items)

    def upsert_many(self, items: Iterable[PropertyRecord]) -> int:
        written = 0
        for rec in items:
            self._items[rec.identifier] = rec
            written += 1
        return written

    def get(self, identifier: str) -> PropertyRecord | None:
        return self._items.get(identifier)

    def list_all(self, limit: int | None = None) -> list[PropertyRecord]:
        items = list(self._items.values())
        return items if limit is None else items[:limit]


class InMemoryVerdictSink(VerdictSink):
    """Latest verdict per property; a rerun overwrites the previous one."""

    def __init__(self) -> None:
        self._items: dict[str, DealVerdict] = {}

    def publish_many(self, verdicts: Iterable[DealVerdict]) -> int:
        n = 0
        for v in verdicts:
            self._items[v.property_identifier] = v
            n += 1
        return n

    def get(self, property_identifier: str) -> DealVerdict | None:
        return self._items.get(property_identifier)

    def all(self) -> list[DealVerdict]:
        return list(self._items.values())
