"""Query model for ``GET /plans``.

The date range is a tagged variant: named ranges carry only their tag, while
``custom`` must carry both bounds. Explicit bounds sent alongside a named range
are ignored.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, StringConstraints, field_validator, model_validator

from plan_api.config import settings

RELATIVE_RANGE_MONTHS: Dict[str, int] = {
    "last_3_months": 3,
    "last_6_months": 6,
    "last_9_months": 9,
    "last_12_months": 12,
    "last_15_months": 15,
    "last_18_months": 18,
}

NamedRangeTag = Literal[
    "all_time",
    "last_3_months",
    "last_6_months",
    "last_9_months",
    "last_12_months",
    "last_15_months",
    "last_18_months",
]


class NamedDateRange(BaseModel):
    kind: NamedRangeTag


class CustomDateRange(BaseModel):
    kind: Literal["custom"]
    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    @model_validator(mode="after")
    def check_order(self) -> "CustomDateRange":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


DateRange = Annotated[Union[NamedDateRange, CustomDateRange], Field(discriminator="kind")]


class PlanFilter(BaseModel):
    page: int = Field(0, ge=0)
    limit: int = Field(20, ge=10, le=settings.PAGINATE_MAX_LIMIT)
    date_range: DateRange = Field(default_factory=lambda: NamedDateRange(kind="all_time"))
    search: Optional[Annotated[str, StringConstraints(strip_whitespace=True)]] = None

    @field_validator("search")
    @classmethod
    def empty_search_is_null(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @classmethod
    def from_query(cls, query: Mapping[str, Any]) -> "PlanFilter":
        """Build a filter from snake_case wire query parameters.

        Raises pydantic's ValidationError on bad input.
        """
        data: Dict[str, Any] = {
            key: query[key] for key in ("page", "limit", "search") if key in query
        }
        date_range: Dict[str, Any] = {"kind": query.get("date_range", "all_time")}
        if date_range["kind"] == "custom":
            for key in ("start_date", "end_date"):
                if key in query:
                    date_range[key] = query[key]
        data["date_range"] = date_range
        return cls.model_validate(data)
