"""
Business profile and suggestion context models.

``BusinessProfile`` is the sparse, partially filled listing form the engine
works from.  Every field is optional and coercion is lenient:
field values never raise.  Numeric strings such as ``"$1,250,000"`` are
parsed, unparseable values become ``None``, and implausible-but-numeric
values (negative revenue, a 140% margin) are kept as-is so the rules and the
scorer can decide to abstain.

Attribute names are snake_case; the camelCase names used by the marketplace
form (``askingPrice``, ``netMargin``, ...) are accepted as aliases.

``SuggestionContext`` carries derived or out-of-band information: category,
size bucket, location and listing type.  Build it with
``SuggestionContext.from_profile()`` when the caller has nothing extra.
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, PrivateAttr, field_validator, model_validator
from pydantic.alias_generators import to_camel

from listing_insights.taxonomy.business_taxonomy import BusinessSize

# Revenue thresholds for the coarse size bucket (strictly greater than).
LARGE_REVENUE_THRESHOLD = 5_000_000
MEDIUM_REVENUE_THRESHOLD = 1_000_000

NUMERIC_FIELDS: frozenset[str] = frozenset({
    "revenue", "gross_margin", "net_margin", "asking_price", "monthly_revenue",
    "profit", "cash_flow", "ebitda", "employees", "years_established",
    "yearly_growth", "liabilities", "total_assets", "customer_base",
})
TEXT_FIELDS: frozenset[str] = frozenset({
    "category", "city", "state", "listing_type", "description",
    "hours_of_operation", "seasonality", "competition",
})

_NUMBER_JUNK = re.compile(r"[,$%\s]")


class UnknownFieldError(ValueError):
    """Raised when a caller names a field that is not part of ``BusinessProfile``.

    This is a contract error (a caller bug), not a data-quality problem.

    Attributes:
        field_name: The name that could not be resolved.
    """

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(
            f"Unknown business profile field '{field_name}'. "
            f"Must be one of {sorted(BusinessProfile.model_fields)}."
        )


def coerce_number(value: Any) -> Optional[float]:
    """Parse a loosely formatted number; return ``None`` when it cannot be read.

    Accepts ints, floats and strings with currency symbols, thousands
    separators or a trailing percent sign.  Booleans, NaN and infinities are
    treated as missing.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = _NUMBER_JUNK.sub("", value)
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def is_populated(value: Any) -> bool:
    """True when a profile value counts as user-entered data.

    ``None``, the empty string and an empty list are "empty"; everything
    else (including ``0``) is populated.
    """
    if value is None:
        return False
    if isinstance(value, str) and value == "":
        return False
    if isinstance(value, (list, tuple)) and len(value) == 0:
        return False
    return True


class BusinessProfile(BaseModel):
    """Sparse business listing record.

    Attributes:
        category: Industry tag, e.g. ``"RESTAURANT"``.  Unknown tags are kept.
        revenue: Annual revenue in USD.
        gross_margin: Gross margin in percent (``62.5`` means 62.5%).
        net_margin: Net margin in percent.
        asking_price: Listing asking price in USD.
        monthly_revenue: Average monthly revenue in USD.
        profit: Annual net profit in USD.
        cash_flow: Annual cash flow (SDE) in USD.
        ebitda: Annual EBITDA in USD.
        employees: Headcount.
        years_established: Years the business has operated.
        city: City of the business location.
        state: Two-letter US state code.
        listing_type: Listing kind (``"business"``, ``"franchise"``, ...).
        description: Free-text listing description.
        days_open: Weekday names the business operates.
        hours_of_operation: Free-text opening hours.
        yearly_growth: Year-over-year revenue growth in percent.
        liabilities: Total liabilities in USD.
        total_assets: Total assets in USD.
        customer_base: Approximate number of active customers.
        seasonality: Free-text seasonality note.
        competition: Free-text competition note.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    category: Optional[str] = None
    revenue: Optional[float] = None
    gross_margin: Optional[float] = None
    net_margin: Optional[float] = None
    asking_price: Optional[float] = None
    monthly_revenue: Optional[float] = None
    profit: Optional[float] = None
    cash_flow: Optional[float] = None
    ebitda: Optional[float] = None
    employees: Optional[float] = None
    years_established: Optional[float] = None
    city: Optional[str] = None
    state: Optional[str] = None
    listing_type: Optional[str] = None
    description: Optional[str] = None
    days_open: Optional[list[str]] = None
    hours_of_operation: Optional[str] = None
    yearly_growth: Optional[float] = None
    liabilities: Optional[float] = None
    total_assets: Optional[float] = None
    customer_base: Optional[float] = None
    seasonality: Optional[str] = None
    competition: Optional[str] = None

    # Fields the caller filled in, judged on the raw input before coercion.
    _entered_fields: frozenset[str] = PrivateAttr(default_factory=frozenset)

    @model_validator(mode="wrap")
    @classmethod
    def record_entered_fields(cls, data: Any, handler: Any) -> "BusinessProfile":
        """Remember which fields held a non-empty raw value.

        ``"call for price"`` coerces to ``None`` but still counts as entered,
        so no suggestion ever overwrites it.
        """
        profile = handler(data)
        if isinstance(data, Mapping):
            entered: set[str] = set()
            for key, value in data.items():
                if not isinstance(key, str) or not is_populated(value):
                    continue
                try:
                    entered.add(cls.resolve_field(key))
                except UnknownFieldError:
                    continue
            profile._entered_fields = frozenset(entered)
        return profile

    @field_validator(*sorted(NUMERIC_FIELDS), mode="before")
    @classmethod
    def coerce_numeric(cls, v: Any) -> Optional[float]:
        return coerce_number(v)

    @field_validator(*sorted(TEXT_FIELDS), mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if isinstance(v, str):
            return v.strip()
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return None

    @field_validator("days_open", mode="before")
    @classmethod
    def coerce_days(cls, v: Any) -> Optional[list[str]]:
        if v is None:
            return None
        if isinstance(v, str):
            items = v.split(",")
        elif isinstance(v, (list, tuple, set, frozenset)):
            items = list(v)
        else:
            return None
        return [str(item).strip() for item in items if str(item).strip()]

    # ── Field helpers ─────────────────────────────────────────────────────────

    @classmethod
    def resolve_field(cls, name: str) -> str:
        """Map a snake_case or camelCase field name to the attribute name.

        Raises:
            UnknownFieldError: If ``name`` is not a profile field.
        """
        if name in cls.model_fields:
            return name
        for attr, info in cls.model_fields.items():
            if info.alias == name:
                return attr
        raise UnknownFieldError(name)

    def is_field_populated(self, field_name: str) -> bool:
        """True when ``field_name`` holds user-entered data on this profile.

        A field counts when its coerced value is populated or when the raw
        input held a non-empty value that did not survive coercion.
        """
        name = self.resolve_field(field_name)
        return name in self._entered_fields or is_populated(getattr(self, name))

    @property
    def entered_fields(self) -> frozenset[str]:
        """Fields that held a non-empty raw value when the profile was built."""
        return self._entered_fields

    def populated_fields(self) -> list[str]:
        """Names of all populated fields, in declaration order."""
        return [name for name in type(self).model_fields if is_populated(getattr(self, name))]


class Location(BaseModel):
    """City / state pair."""

    model_config = ConfigDict(frozen=True)

    city: Optional[str] = None
    state: Optional[str] = None

    @field_validator("city", "state", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        if isinstance(v, str) and v.strip():
            return v.strip()
        return None


class SuggestionContext(BaseModel):
    """Derived / out-of-band information used by suggestion rules.

    Attributes:
        category: Industry tag; falls back to ``profile.category`` in the engine.
        business_size: Revenue bucket (``small``/``medium``/``large``).
        location: City and state.
        listing_type: Listing kind.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    category: Optional[str] = None
    business_size: Optional[BusinessSize] = None
    location: Location = Location()
    listing_type: Optional[str] = None

    @field_validator("category", "listing_type", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        if isinstance(v, str) and v.strip():
            return v.strip()
        return None

    @field_validator("business_size", mode="before")
    @classmethod
    def coerce_size(cls, v: Any) -> Optional[str]:
        if isinstance(v, str) and v.strip().lower() in {s.value for s in BusinessSize}:
            return v.strip().lower()
        return None

    @field_validator("location", mode="before")
    @classmethod
    def coerce_location(cls, v: Any) -> Any:
        if isinstance(v, (Location, dict)):
            return v
        return Location()

    @classmethod
    def from_profile(
        cls,
        profile: BusinessProfile,
        business_size: Optional[str] = None,
    ) -> "SuggestionContext":
        """Build a context from the profile plus an optional stated size.

        When ``business_size`` is not given it is derived from revenue.
        """
        return cls(
            category=profile.category,
            business_size=business_size or size_bucket(profile.revenue),
            location=Location(city=profile.city, state=profile.state),
            listing_type=profile.listing_type,
        )


def size_bucket(revenue: Optional[float]) -> Optional[BusinessSize]:
    """Classify annual revenue into a ``BusinessSize``; ``None`` without positive revenue."""
    if revenue is None or revenue <= 0:
        return None
    if revenue > LARGE_REVENUE_THRESHOLD:
        return BusinessSize.LARGE
    if revenue > MEDIUM_REVENUE_THRESHOLD:
        return BusinessSize.MEDIUM
    return BusinessSize.SMALL


def coerce_profile(profile: Any) -> BusinessProfile:
    """Return ``profile`` as a ``BusinessProfile``.

    Accepts a model, a mapping (non-string keys are dropped) or ``None``.

    Raises:
        TypeError: For anything else.
    """
    if profile is None:
        return BusinessProfile()
    if isinstance(profile, BusinessProfile):
        return profile
    if isinstance(profile, Mapping):
        return BusinessProfile.model_validate(
            {k: v for k, v in profile.items() if isinstance(k, str)}
        )
    raise TypeError(
        f"profile must be a BusinessProfile, a mapping or None, got {type(profile).__name__}."
    )


def coerce_context(context: Any) -> SuggestionContext:
    """Return ``context`` as a ``SuggestionContext``.

    Raises:
        TypeError: If ``context`` is not a model, a mapping or ``None``.
    """
    if context is None:
        return SuggestionContext()
    if isinstance(context, SuggestionContext):
        return context
    if isinstance(context, Mapping):
        return SuggestionContext.model_validate(
            {k: v for k, v in context.items() if isinstance(k, str)}
        )
    raise TypeError(
        f"context must be a SuggestionContext, a mapping or None, got {type(context).__name__}."
    )
