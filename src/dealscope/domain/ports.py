# src/dealscope/domain/ports.py
from __future__ import annotations

from typing import Iterable, Protocol

from dealscope.domain.property import PropertyRecord
from dealscope.domain.underwriting import DealVerdict


# ----------------------------
# Property storage
# ----------------------------

class PropertyStore(Protocol):
    def upsert_many(self, items: Iterable[PropertyRecord]) -> int:
        ...

    def get(self, identifier: str) -> PropertyRecord | None:
        ...

    def list_all(self, limit: int | None = None) -> list[PropertyRecord]:
        ...


# ----------------------------
# Verdict persistence / forwarding
# ----------------------------

class VerdictSink(Protocol):
    def publish_many(self, verdicts: Iterable[DealVerdict]) -> int:
        """Store verdicts, replacing any earlier verdict for the same property."""
        ...

    def get(self, property_identifier: str) -> DealVerdict | dict | None:
        ...
