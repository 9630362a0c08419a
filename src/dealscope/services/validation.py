# src/dealscope/services/validation.py

import json
import math
from typing import Any, Mapping

from pydantic import ValidationError

from dealscope.domain.errors import InputError
from dealscope.domain.property import ComparableSale, PropertyRecord

# Upstream column names we accept for each typed field (first hit wins)
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "identifier": ("identifier", "id", "property_id", "propertyId", "external_id"),
    "address": ("address", "street", "street_address"),
    "city": ("city",),
    "state": ("state",),
    "zipcode": ("zipcode", "zip", "postal_code", "postalCode"),
    "asking_price": ("asking_price", "askingPrice", "list_price", "price"),
    "arv": ("arv", "after_repair_value", "afterRepairValue"),
    "repair_estimate": ("repair_estimate", "repairEstimate", "repairs", "rehab_budget"),
    "sqft": ("sqft", "square_feet", "squareFeet", "living_area"),
    "bedrooms": ("bedrooms", "beds"),
    "bathrooms": ("bathrooms", "baths"),
    "year_built": ("year_built", "yearBuilt"),
    "notes": ("notes", "description", "comments"),
    "occupancy": ("occupancy",),
    "condition": ("condition",),
    "condition_after_repair": ("condition_after_repair", "conditionAfterRepair", "arv_condition"),
    "roof_age": ("roof_age", "roofAge"),
    "hvac_age": ("hvac_age", "hvacAge"),
    "plumbing_condition": ("plumbing_condition", "plumbingCondition"),
    "electrical_condition": ("electrical_condition", "electricalCondition"),
    "foundation_issues": ("foundation_issues", "foundationIssues"),
    "title_issues": ("title_issues", "titleIssues"),
    "cosmetic_needs": ("cosmetic_needs", "cosmeticNeeds"),
    "inspection_report": ("inspection_report", "inspectionReport"),
    "seller_motivation": ("seller_motivation", "sellerMotivation", "motivation"),
    "days_on_market": ("days_on_market", "daysOnMarket", "dom"),
    "location_score": ("location_score", "locationScore"),
    "existing_mortgage_balance": ("existing_mortgage_balance", "existingMortgageBalance", "mortgage_balance"),
    "mortgage_rate": ("mortgage_rate", "mortgageRate", "interest_rate"),
    "market_volume_score": ("market_volume_score", "marketVolumeScore"),
    "velocity_score": ("velocity_score", "velocityScore"),
}

NUMERIC_FIELDS = {
    "asking_price",
    "arv",
    "repair_estimate",
    "sqft",
    "bedrooms",
    "bathrooms",
    "market_volume_score",
    "velocity_score",
    "condition",
    "condition_after_repair",
    "roof_age",
    "hvac_age",
    "plumbing_condition",
    "electrical_condition",
    "seller_motivation",
    "days_on_market",
    "location_score",
    "existing_mortgage_balance",
    "mortgage_rate",
}

BOOL_FIELDS = {"foundation_issues", "title_issues", "inspection_report"}

_TRUE = {"true", "yes", "y", "1"}
_FALSE = {"false", "no", "n", "0"}

COMP_ALIASES: dict[str, tuple[str, ...]] = {
    "sale_price": ("sale_price", "salePrice", "price"),
    "sqft": ("sqft", "square_feet", "squareFeet"),
    "bedrooms": ("bedrooms", "beds"),
    "bathrooms": ("bathrooms", "baths"),
    "year_built": ("year_built", "yearBuilt"),
    "condition": ("condition",),
}


def _is_blank(val: Any) -> bool:
    if val is None:
        return True
    if isinstance(val, float) and math.isnan(val):
        # pandas hands empty cells over as NaN
        return True
    if isinstance(val, str) and not val.strip():
        return True
    return False


def _pick(raw: Mapping[str, Any], names: tuple[str, ...]) -> Any:
    for n in names:
        if n in raw and not _is_blank(raw[n]):
            return raw[n]
    return None


def _to_num_optional(val: Any, field_name: str, identifier: str | None) -> float | None:
    """
    Coerce values like 250000, "250000", "$250,000", "1,200" into float.
    Blank / missing -> None. Anything else unparseable is an InputError.
    """
    if _is_blank(val):
        return None
    if isinstance(val, bool):
        raise InputError(identifier, f"Invalid type for {field_name}: bool")
    if isinstance(val, (int, float)):
        f = float(val)
    elif isinstance(val, str):
        s = val.strip().replace("$", "").replace(",", "")
        try:
            f = float(s)
        except ValueError:
            raise InputError(identifier, f"Invalid number for {field_name}: {val!r}")
    else:
        raise InputError(identifier, f"Invalid type for {field_name}: {type(val).__name__}")
    if not math.isfinite(f):
        raise InputError(identifier, f"Non-finite value for {field_name}: {val!r}")
    return f


def _to_bool_optional(val: Any, field_name: str, identifier: str | None) -> bool | None:
    """Accept True/False, 1/0 and yes/no style strings. Blank -> None."""
    if _is_blank(val):
        return None
    if isinstance(val, bool):
        return val
    if isinstance(val, (int, float)) and val in (0, 1):
        return bool(val)
    if isinstance(val, str):
        s = val.strip().lower()
        if s in _TRUE:
            return True
        if s in _FALSE:
            return False
    raise InputError(identifier, f"Invalid flag for {field_name}: {val!r}")


def _derive_identifier(raw: Mapping[str, Any]) -> str | None:
    ident = _pick(raw, FIELD_ALIASES["identifier"])
    if ident is not None:
        return str(ident).strip()
    address = _pick(raw, FIELD_ALIASES["address"])
    if address is None:
        return None
    zipcode = _pick(raw, FIELD_ALIASES["zipcode"]) or ""
    return f"{str(address).strip()}|{str(zipcode).strip()}"


def _parse_comps(raw_comps: Any, identifier: str | None) -> tuple[ComparableSale, ...]:
    if _is_blank(raw_comps):
        return ()
    if isinstance(raw_comps, str):
        # CSV cells carry comps as JSON text
        try:
            raw_comps = json.loads(raw_comps)
        except json.JSONDecodeError as err:
            raise InputError(identifier, "comps is not valid JSON") from err
    if not isinstance(raw_comps, (list, tuple)):
        raise InputError(identifier, "comps must be a list")
    comps = []
    for item in raw_comps:
        if isinstance(item, ComparableSale):
            comps.append(item)
            continue
        if not isinstance(item, Mapping):
            raise InputError(identifier, "each comp must be a mapping")
        fields: dict[str, Any] = {}
        for name, aliases in COMP_ALIASES.items():
            value = _pick(item, aliases)
            if name == "year_built":
                num = _to_num_optional(value, f"comps.{name}", identifier)
                fields[name] = int(num) if num else None
            else:
                fields[name] = _to_num_optional(value, f"comps.{name}", identifier)
        try:
            comps.append(ComparableSale(**fields))
        except ValidationError as err:
            raise InputError(identifier, f"invalid comp: {err.errors()[0]['msg']}") from err
    return tuple(comps)


def record_from_payload(raw: Mapping[str, Any]) -> PropertyRecord:
    """
    Map a loose upstream row (CSV line, JSON body, store document) into a
    typed PropertyRecord.

    Responsibilities:
      - Resolve column aliases (zip / zipcode, list_price / asking_price, ...).
      - Normalize currency-ish strings ("$150,000") and blank cells.
      - Fall back to "address|zipcode" when the row has no identifier.
    Raises InputError carrying the identifier (when known).
    """
    if isinstance(raw, PropertyRecord):
        return raw

    identifier = _derive_identifier(raw)
    if not identifier:
        raise InputError(None, "Missing required field: identifier (and no address to derive one)")

    fields: dict[str, Any] = {"identifier": identifier}
    for name, aliases in FIELD_ALIASES.items():
        if name == "identifier":
            continue
        value = _pick(raw, aliases)
        if name in NUMERIC_FIELDS:
            num = _to_num_optional(value, name, identifier)
            if num is not None:
                fields[name] = num
        elif name in BOOL_FIELDS:
            flag = _to_bool_optional(value, name, identifier)
            if flag is not None:
                fields[name] = flag
        elif name == "year_built":
            num = _to_num_optional(value, name, identifier)
            if num:
                fields[name] = int(num)
        elif name == "cosmetic_needs" and value is not None:
            fields[name] = str(value).strip().lower()
        elif value is not None:
            fields[name] = str(value).strip()

    fields["comps"] = _parse_comps(raw.get("comps"), identifier)

    try:
        return PropertyRecord(**fields)
    except ValidationError as err:
        first = err.errors()[0]
        loc = ".".join(str(p) for p in first["loc"])
        raise InputError(identifier, f"Invalid field {loc}: {first['msg']}") from err


def validate_record(record: PropertyRecord) -> PropertyRecord:
    """
    Required-field checks the analyzer needs before any math runs:
      - a non-blank address
      - an asking price, or something to value the property from (ARV / comps)
    """
    if not record.address.strip():
        raise InputError(record.identifier, "Missing required field: address")
    if record.asking_price is None and record.arv is None and not record.comps:
        raise InputError(record.identifier, "Missing required field: asking_price (no ARV inputs either)")
    return record
