# tests/fixtures/records.py

from dealscope.domain.property import PropertyRecord


def _base_row_template() -> dict:
    return dict(
        identifier="prop-000",
        address="123 Test St",
        city="Testville",
        state="MI",
        zipcode="48009",
        notes="",
    )


def solid_flip_row() -> dict:
    """
    ARV 300k, asking 150k, repairs 20k, newer house, clean notes.
    Expected: MAO 172k, spread 22k -> SOLID (spread below the HOT gate).
    """
    row = _base_row_template()
    row.update(
        identifier="solid-1",
        address="10 Solid Ave",
        arv=300_000,
        asking_price=150_000,
        repair_estimate=20_000,
        year_built=2005,
    )
    return row


def hot_flip_row() -> dict:
    """
    ARV 400k, asking 150k, repairs 20k.
    Expected: MAO 239k, spread 89k, profit well above 20% -> HOT.
    """
    row = _base_row_template()
    row.update(
        identifier="hot-1",
        address="20 Hot Blvd",
        arv=400_000,
        asking_price=150_000,
        repair_estimate=20_000,
        year_built=2010,
    )
    return row


def overpriced_row() -> dict:
    """
    ARV 200k, asking 190k: MAO lands far below asking.
    Expected: PASS.
    """
    row = _base_row_template()
    row.update(
        identifier="pass-1",
        address="30 Pricey Ct",
        arv=200_000,
        asking_price=190_000,
        repair_estimate=10_000,
        year_built=1999,
    )
    return row


def risky_row() -> dict:
    """
    Big rehab plus foundation and probate notes.
    Expected risk: 2 (repairs) + 3 (structural) + 2 (legal) = 7.
    """
    row = _base_row_template()
    row.update(
        identifier="risky-1",
        address="40 Cracked Rd",
        arv=320_000,
        asking_price=120_000,
        repair_estimate=60_000,
        notes="foundation issues, probate",
        year_built=2001,
    )
    return row


def missing_address_row() -> dict:
    row = _base_row_template()
    row.update(identifier="bad-1", asking_price=100_000, arv=180_000)
    row.pop("address")
    return row


def record(**overrides) -> PropertyRecord:
    fields = _base_row_template()
    fields.update(overrides)
    return PropertyRecord(**fields)
