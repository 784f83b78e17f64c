from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, StringConstraints, field_validator
from pydantic.alias_generators import to_camel


class PeriodUnit(str, Enum):
    DAYS = "days"
    MONTHS = "months"


PlanName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
PlanCode = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        to_lower=True,
        min_length=2,
        max_length=20,
        pattern=r"^[A-Za-z0-9]+$",
    ),
]
PlanDescription = Annotated[str, StringConstraints(strip_whitespace=True, max_length=200)]


class PlanCreate(BaseModel):
    """Body of ``POST /plans``.

    Keys arrive in camelCase. Anything not listed here, ``ownerId`` included,
    is ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        allow_inf_nan=False,
    )

    name: PlanName
    code: PlanCode
    description: Optional[PlanDescription] = None
    billing_cycle_period: int
    billing_cycle_period_unit: PeriodUnit
    price_per_billing_cycle: float
    setup_fee: float = 0
    total_billing_cycles: int
    trial_period: int = 0
    trial_period_unit: PeriodUnit = PeriodUnit.DAYS
    renews: bool = True

    @field_validator("description")
    @classmethod
    def empty_description_is_null(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("renews", mode="before")
    @classmethod
    def only_true_or_false(cls, v: Any) -> Any:
        # Booleans or the strings "true"/"false"; no "yes", "on" or 1.
        if isinstance(v, bool):
            return v
        if isinstance(v, str) and v.strip().lower() in ("true", "false"):
            return v.strip().lower() == "true"
        raise ValueError("must be a boolean")

    def to_document(self) -> Dict[str, Any]:
        """Storage representation, without owner or timestamps."""
        document = self.model_dump()
        document["billing_cycle_period_unit"] = self.billing_cycle_period_unit.value
        document["trial_period_unit"] = self.trial_period_unit.value
        return document


class PlanOut(BaseModel):
    """The externally visible shape of a plan."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    owner_id: str
    name: str
    code: str
    description: Optional[str] = None
    billing_cycle_period: int
    billing_cycle_period_unit: PeriodUnit
    price_per_billing_cycle: float
    setup_fee: float
    total_billing_cycles: int
    trial_period: int
    trial_period_unit: PeriodUnit
    renews: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, plan: Dict[str, Any]) -> "PlanOut":
        return cls(
            id=str(plan["_id"]),
            owner_id=str(plan["owner_id"]),
            name=plan["name"],
            code=plan["code"],
            description=plan.get("description"),
            billing_cycle_period=plan["billing_cycle_period"],
            billing_cycle_period_unit=plan["billing_cycle_period_unit"],
            price_per_billing_cycle=plan["price_per_billing_cycle"],
            setup_fee=plan.get("setup_fee", 0),
            total_billing_cycles=plan["total_billing_cycles"],
            trial_period=plan.get("trial_period", 0),
            trial_period_unit=plan.get("trial_period_unit", PeriodUnit.DAYS.value),
            renews=plan.get("renews", True),
            created_at=plan["created_at"],
            updated_at=plan["updated_at"],
        )

    def to_external(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
