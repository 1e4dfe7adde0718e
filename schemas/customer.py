"""
Customer application schemas.

Category inputs (personal, contact, loan) are parsed straight into their stored
form. Financial input arrives as flag + amount pairs and is converted into
Disclosed / NotDisclosed variants before it is stored.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    EmailStr,
    Field,
    StrictBool,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

# YYYY-MM-DD, optionally followed by an ISO 8601 time and offset
_ISO_DATE_STRING = re.compile(r"\d{4}-\d{2}-\d{2}(?:[T ][0-9:.]+(?:Z|[+-]\d{2}:?\d{2})?)?")
_date_adapter = TypeAdapter(date)
_datetime_adapter = TypeAdapter(datetime)


class PersonalInfoSchema(BaseModel):
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    date_of_birth: date = Field(..., alias="dateOfBirth")

    model_config = {"populate_by_name": True, "extra": "forbid"}

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def _parse_iso_date(cls, value: Any) -> date:
        # Only ISO date/datetime strings; numbers are never read as timestamps
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if not isinstance(value, str) or not _ISO_DATE_STRING.fullmatch(value):
            raise ValueError("dateOfBirth must be an ISO date string")
        try:
            if len(value) == 10:
                return _date_adapter.validate_python(value)
            return _datetime_adapter.validate_python(value).date()
        except ValidationError as e:
            raise ValueError("dateOfBirth must be an ISO date string") from e


class ContactInfoSchema(BaseModel):
    email: EmailStr
    phone: str

    model_config = {"populate_by_name": True, "extra": "forbid"}


class LoanInfoSchema(BaseModel):
    amount: int
    upfront: float
    terms: int = Field(..., description="Loan term in months")

    model_config = {"populate_by_name": True, "extra": "forbid", "allow_inf_nan": False}


class Disclosed(BaseModel):
    kind: Literal["disclosed"] = "disclosed"
    amount: float


class NotDisclosed(BaseModel):
    kind: Literal["not_disclosed"] = "not_disclosed"


Disclosure = Annotated[Union[Disclosed, NotDisclosed], Field(discriminator="kind")]

# (flag, amount) field names of the optional financial disclosures
DISCLOSURE_FIELDS: tuple[tuple[str, str], ...] = (
    ("has_additional_income", "additional_income"),
    ("has_mortgage", "mortgage"),
    ("has_other_credits", "other_credits"),
)


def disclosed_amount(disclosure: Disclosed | NotDisclosed) -> float:
    """Amount of a disclosure; zero when nothing was disclosed."""
    if isinstance(disclosure, Disclosed):
        return disclosure.amount
    return 0.0


class FinancialInfoInput(BaseModel):
    """Wire shape of the financial step: a boolean flag per disclosure plus its amount."""
    monthly_salary: float = Field(..., alias="monthlySalary")
    has_additional_income: StrictBool = Field(..., alias="hasAdditionalIncome")
    additional_income: Optional[float] = Field(None, alias="additionalIncome")
    has_mortgage: StrictBool = Field(..., alias="hasMortgage")
    mortgage: Optional[float] = None
    has_other_credits: StrictBool = Field(..., alias="hasOtherCredits")
    other_credits: Optional[float] = Field(None, alias="otherCredits")

    model_config = {"populate_by_name": True, "extra": "forbid", "allow_inf_nan": False}

    @model_validator(mode="before")
    @classmethod
    def _drop_undisclosed_amounts(cls, data: Any) -> Any:
        # An amount paired with a false flag is ignored, whatever its value
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for flag, amount in DISCLOSURE_FIELDS:
            if any(data.get(flag_key) is False for flag_key in (flag, to_camel(flag))):
                data.pop(amount, None)
                data.pop(to_camel(amount), None)
        return data


class FinancialInfoSchema(BaseModel):
    monthly_salary: float
    additional_income: Disclosure = Field(default_factory=NotDisclosed)
    mortgage: Disclosure = Field(default_factory=NotDisclosed)
    other_credits: Disclosure = Field(default_factory=NotDisclosed)

    def to_flat_dict(self) -> dict[str, Any]:
        """Render disclosures back as flag + amount pairs (amount is None when not disclosed)."""
        out: dict[str, Any] = {"monthly_salary": self.monthly_salary}
        for flag, amount in DISCLOSURE_FIELDS:
            disclosure = getattr(self, amount)
            out[flag] = isinstance(disclosure, Disclosed)
            out[amount] = disclosure.amount if isinstance(disclosure, Disclosed) else None
        return out


class CustomerSchema(BaseModel):
    uid: str
    personal_info: Optional[PersonalInfoSchema] = None
    contact_info: Optional[ContactInfoSchema] = None
    loan_info: Optional[LoanInfoSchema] = None
    financial_info: Optional[FinancialInfoSchema] = None
    is_finalized: bool = False

    model_config = {"populate_by_name": True}


class FieldErrorSchema(BaseModel):
    field: str
    reason: str


class AffordabilityAssessment(BaseModel):
    amount: int
    terms: int
    monthly_salary: float
    additional_income: float
    mortgage: float
    other_credits: float
    monthly_other_credits: float
    net_monthly_income: float
    max_affordable_loan: float
    affordable: bool
