# src/dealscope/adapters/sql_repo.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from sqlmodel import JSON, Column, Field, Session, SQLModel, create_engine, select

from dealscope.domain.property import PropertyRecord
from dealscope.domain.underwriting import TIER_ORDER, DealVerdict


# ---------- Property storage ----------

class PropertyRow(SQLModel, table=True):
    __tablename__ = "properties"

    identifier: str = Field(primary_key=True)
    ts: datetime = Field(default_factory=datetime.utcnow, index=True)

    address: str
    city: str
    state: str
    zipcode: str = Field(index=True)

    asking_price: float | None = Field(default=None, index=True)

    record: dict[str, Any] = Field(sa_column=Column(JSON))


class SqlPropertyRepository:
    def __init__(self, uri: str = "sqlite:///dealscope.db"):
        self.engine = create_engine(uri, echo=False)
        SQLModel.metadata.create_all(self.engine)

    def upsert_many(self, items: Iterable[PropertyRecord]) -> int:
        written = 0
        with Session(self.engine) as session:
            for item in items:
                doc = item.model_dump(mode="json")
                row = session.get(PropertyRow, item.identifier)
                if row:
                    row.address = item.address
                    row.city = item.city
                    row.state = item.state
                    row.zipcode = item.zipcode
                    row.asking_price = item.asking_price
                    row.record = doc
                    row.ts = datetime.utcnow()
                else:
                    row = PropertyRow(
                        identifier=item.identifier,
                        address=item.address,
                        city=item.city,
                        state=item.state,
                        zipcode=item.zipcode,
                        asking_price=item.asking_price,
                        record=doc,
                    )
                session.add(row)
                written += 1
            session.commit()
        return written

    def get(self, identifier: str) -> PropertyRecord | None:
        with Session(self.engine) as session:
            row = session.get(PropertyRow, identifier)
            return PropertyRecord.model_validate(row.record) if row else None

    def list_all(self, limit: int | None = None) -> list[PropertyRecord]:
        with Session(self.engine) as session:
            stmt = select(PropertyRow).order_by(PropertyRow.identifier)
            if limit is not None:
                stmt = stmt.limit(limit)
            rows = list(session.exec(stmt))
        return [PropertyRecord.model_validate(r.record) for r in rows]

    def search(self, zipcode: str, max_price: float | None = None, limit: int = 200) -> list[PropertyRecord]:
        with Session(self.engine) as session:
            stmt = select(PropertyRow).where(PropertyRow.zipcode == zipcode)
            if max_price is not None:
                stmt = stmt.where(PropertyRow.asking_price <= max_price)
            stmt = stmt.order_by(PropertyRow.asking_price).limit(limit)
            rows = list(session.exec(stmt))
        return [PropertyRecord.model_validate(r.record) for r in rows]


# ---------- Verdicts ----------

class VerdictRow(SQLModel, table=True):
    __tablename__ = "verdicts"

    property_identifier: str = Field(primary_key=True)
    ts: datetime = Field(default_factory=datetime.utcnow, index=True)

    classification: str = Field(index=True)
    priority: str
    deal_score: int = Field(index=True)
    recommended_exit_strategy: str | None = None

    result: dict[str, Any] = Field(sa_column=Column(JSON))


class SqlVerdictRepository:
    """One row per property; publishing again replaces the earlier verdict."""

    def __init__(self, uri: str = "sqlite:///dealscope.db"):
        self.engine = create_engine(uri, echo=False)
        SQLModel.metadata.create_all(self.engine)

    def publish_many(self, verdicts: Iterable[DealVerdict]) -> int:
        written = 0
        with Session(self.engine) as session:
            for v in verdicts:
                row = session.get(VerdictRow, v.property_identifier)
                if row is None:
                    row = VerdictRow(
                        property_identifier=v.property_identifier,
                        classification=v.classification,
                        priority=v.priority,
                        deal_score=v.deal_score,
                        recommended_exit_strategy=v.recommended_exit_strategy,
                        result=v.to_dict(),
                    )
                else:
                    row.classification = v.classification
                    row.priority = v.priority
                    row.deal_score = v.deal_score
                    row.recommended_exit_strategy = v.recommended_exit_strategy
                    row.result = v.to_dict()
                    row.ts = datetime.utcnow()
                session.add(row)
                written += 1
            session.commit()
        return written

    def get(self, property_identifier: str) -> dict[str, Any] | None:
        with Session(self.engine) as session:
            row = session.get(VerdictRow, property_identifier)
            return dict(row.result) if row else None

    def list_ranked(self, limit: int = 50, classification: str | None = None) -> list[dict[str, Any]]:
        with Session(self.engine) as session:
            stmt = select(VerdictRow)
            if classification is not None:
                stmt = stmt.where(VerdictRow.classification == classification)
            rows = list(session.exec(stmt))

        rows.sort(key=lambda r: (TIER_ORDER.get(r.classification, 9), -r.deal_score, r.property_identifier))
        return [dict(r.result) for r in rows[:limit]]
