from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

CosmeticLevel = Literal["light", "medium", "heavy"]


class ComparableSale(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False, extra="ignore")

    sale_price: float = Field(..., gt=0)
    sqft: float | None = None
    bedrooms: float | None = None
    bathrooms: float | None = None
    year_built: int | None = None
    condition: float | None = Field(default=None, ge=1, le=10, description="1 = gut job, 10 = move-in ready")


class PropertyRecord(BaseModel):
    """
    Typed listing record as seen by the analysis core.

    Raw rows are mapped into this shape at the ingestion boundary
    (see services/validation.py); the core never looks at raw columns.
    Required-field checks (address, some price input) happen in the
    analyzer so that a batch can report them per record.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False, extra="ignore")

    identifier: str

    address: str = ""
    city: str = ""
    state: str = ""
    zipcode: str = ""

    asking_price: float | None = Field(default=None, description="Seller asking / list price")
    arv: float | None = Field(default=None, description="After-repair value, estimated when absent")
    repair_estimate: float | None = Field(default=None, description="Rehab budget, estimated when absent")
    sqft: float | None = None
    bedrooms: float | None = None
    bathrooms: float | None = None
    year_built: int | None = None

    notes: str = ""
    occupancy: str | None = None

    # Condition survey (1-10 scales, 1 = worst). `condition` switches on the
    # itemized repair estimate.
    condition: float | None = Field(default=None, ge=1, le=10)
    condition_after_repair: float | None = Field(default=None, ge=1, le=10)
    roof_age: float | None = Field(default=None, ge=0)
    hvac_age: float | None = Field(default=None, ge=0)
    plumbing_condition: float | None = Field(default=None, ge=1, le=10)
    electrical_condition: float | None = Field(default=None, ge=1, le=10)
    foundation_issues: bool = False
    title_issues: bool = False
    cosmetic_needs: CosmeticLevel | None = None
    inspection_report: bool = False

    # Lead signals
    seller_motivation: float | None = Field(default=None, ge=0, le=10)
    days_on_market: float | None = Field(default=None, ge=0)
    location_score: float | None = Field(default=None, ge=0, le=10)

    # Existing financing, for subject-to projections
    existing_mortgage_balance: float | None = Field(default=None, ge=0)
    mortgage_rate: float | None = Field(default=None, ge=0, le=30, description="Annual rate in percent, e.g. 4.5")

    # 0-100 market signals used by the exit strategy advisor
    market_volume_score: float = 50.0
    velocity_score: float = 50.0

    comps: tuple[ComparableSale, ...] = ()

    @field_validator("identifier")
    @classmethod
    def _identifier_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("identifier must not be blank")
        return v

    @field_validator("market_volume_score", "velocity_score")
    @classmethod
    def _score_range(cls, v: float) -> float:
        if not (0.0 <= v <= 100.0):
            raise ValueError("market scores must be between 0 and 100")
        return v

    @field_validator("asking_price", "arv", "repair_estimate", "sqft")
    @classmethod
    def _non_negative(cls, v: float | None) -> float | None:
        if v is not None and v < 0:
            raise ValueError("must be non-negative")
        return v
