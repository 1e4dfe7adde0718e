"""
Validation rules for each step of a customer application.

Every rule is stateless: it sees only the submitted data (plus the already known
date of birth for the loan step) and either returns the validated category object
or raises ValidationFailed with one error per offending field.
Shape and type checks are delegated to the Pydantic schemas; the business
constraints are checked here so each failure gets a readable reason.
"""
from __future__ import annotations

import re
from datetime import date
from typing import Any, Mapping, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from schemas.customer import (
    DISCLOSURE_FIELDS,
    ContactInfoSchema,
    Disclosed,
    FieldErrorSchema,
    FinancialInfoInput,
    FinancialInfoSchema,
    LoanInfoSchema,
    NotDisclosed,
    PersonalInfoSchema,
)
from services.exceptions import ValidationFailed
from utils.case import to_camel_key
from utils.dates import calculate_age

# Latin + German letters
NAME_TOKEN_REGEX = re.compile(r"[A-Za-zÄÖÜäöüß]+")
LAST_NAME_REGEX = re.compile(r"[A-Za-zÄÖÜäöüß]+(?:[ \-][A-Za-zÄÖÜäöüß]+)*")
E164_REGEX = re.compile(r"\+[1-9][0-9]{1,14}")

MAX_AGE = 79
MAX_AGE_AT_TERM_END = 80
MIN_LOAN_AMOUNT = 10_000
MAX_LOAN_AMOUNT = 70_000
MIN_TERMS = 10
MAX_TERMS = 30

MSG_FIRST_NAME = "First name must contain only Latin/German letters and be a single name"
MSG_LAST_NAME = "Last name must contain only Latin/German letters, may include spaces or hyphens"
MSG_DATE_OF_BIRTH = "dateOfBirth must be an ISO date string"
MSG_MAX_AGE = "Age must be less than 80 years old"
MSG_EMAIL = "Email must be a valid email address"
MSG_PHONE = "Phone must be in E.164 format (e.g. +1234567890)"
MSG_UPFRONT = "Upfront payment must be less than loan amount"
MSG_TERMS_AGE = "Terms divided by 12 plus your age must be less than 80"
MSG_SALARY = "Monthly salary must be provided and greater than 0"

# Replacement reasons for type/format errors reported by Pydantic
_TYPE_ERROR_MESSAGES = {
    "firstName": MSG_FIRST_NAME,
    "lastName": MSG_LAST_NAME,
    "dateOfBirth": MSG_DATE_OF_BIRTH,
    "email": MSG_EMAIL,
    "phone": MSG_PHONE,
    "monthlySalary": MSG_SALARY,
}

_DISCLOSURE_LABELS = {
    "additional_income": "Additional income",
    "mortgage": "Mortgage amount",
    "other_credits": "Other credits amount",
}

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _field_errors(exc: ValidationError) -> list[FieldErrorSchema]:
    errors: list[FieldErrorSchema] = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        if err["type"] == "missing":
            reason = f"{field} is required"
        elif err["type"] == "extra_forbidden":
            reason = f"property {field} should not exist"
        else:
            reason = _TYPE_ERROR_MESSAGES.get(field, err["msg"])
        errors.append(FieldErrorSchema(field=field, reason=reason))
    return errors


def _parse(schema: type[SchemaT], data: Mapping[str, Any]) -> SchemaT:
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed(_field_errors(e)) from e


def validate_personal_info(data: Mapping[str, Any], today: Optional[date] = None) -> PersonalInfoSchema:
    info = _parse(PersonalInfoSchema, data)
    errors: list[FieldErrorSchema] = []
    if not NAME_TOKEN_REGEX.fullmatch(info.first_name):
        errors.append(FieldErrorSchema(field="firstName", reason=MSG_FIRST_NAME))
    if not LAST_NAME_REGEX.fullmatch(info.last_name):
        errors.append(FieldErrorSchema(field="lastName", reason=MSG_LAST_NAME))
    if calculate_age(info.date_of_birth, today) > MAX_AGE:
        errors.append(FieldErrorSchema(field="dateOfBirth", reason=MSG_MAX_AGE))
    if errors:
        raise ValidationFailed(errors)
    return info


def validate_contact_info(data: Mapping[str, Any]) -> ContactInfoSchema:
    info = _parse(ContactInfoSchema, data)
    if not E164_REGEX.fullmatch(info.phone):
        raise ValidationFailed([FieldErrorSchema(field="phone", reason=MSG_PHONE)])
    return info


def terms_fit_age(terms: int, date_of_birth: date, today: Optional[date] = None) -> bool:
    """True when the applicant is younger than 80 at the end of the loan term."""
    return terms / 12 + calculate_age(date_of_birth, today) < MAX_AGE_AT_TERM_END


def validate_loan_info(
    data: Mapping[str, Any],
    date_of_birth: Optional[date] = None,
    today: Optional[date] = None,
) -> LoanInfoSchema:
    """
    Validate the loan step. When the applicant's date of birth is already on record,
    also require that their age plus the term (in years) stays below 80.
    """
    info = _parse(LoanInfoSchema, data)
    errors: list[FieldErrorSchema] = []
    if info.amount < MIN_LOAN_AMOUNT:
        errors.append(FieldErrorSchema(field="amount", reason="Loan amount must be at least 10,000"))
    elif info.amount > MAX_LOAN_AMOUNT:
        errors.append(FieldErrorSchema(field="amount", reason="Loan amount must be at most 70,000"))
    if not info.upfront < info.amount:
        errors.append(FieldErrorSchema(field="upfront", reason=MSG_UPFRONT))
    if info.terms < MIN_TERMS:
        errors.append(FieldErrorSchema(field="terms", reason="Terms must be at least 10 months"))
    elif info.terms > MAX_TERMS:
        errors.append(FieldErrorSchema(field="terms", reason="Terms must be at most 30 months"))
    elif date_of_birth is not None and not terms_fit_age(info.terms, date_of_birth, today):
        errors.append(FieldErrorSchema(field="terms", reason=MSG_TERMS_AGE))
    if errors:
        raise ValidationFailed(errors)
    return info


def validate_financial_info(data: Mapping[str, Any]) -> FinancialInfoSchema:
    """
    Validate the financial step and turn each flag + amount pair into a disclosure.
    An amount is required (and must be >= 0) only when its flag is true.
    """
    raw = _parse(FinancialInfoInput, data)
    errors: list[FieldErrorSchema] = []
    if not raw.monthly_salary > 0:
        errors.append(FieldErrorSchema(field="monthlySalary", reason=MSG_SALARY))

    disclosures: dict[str, Disclosed | NotDisclosed] = {}
    for flag, amount_field in DISCLOSURE_FIELDS:
        if not getattr(raw, flag):
            disclosures[amount_field] = NotDisclosed()
            continue
        amount = getattr(raw, amount_field)
        label = _DISCLOSURE_LABELS[amount_field]
        if amount is None:
            errors.append(FieldErrorSchema(
                field=to_camel_key(amount_field),
                reason=f"{label} is required when {to_camel_key(flag)} is true",
            ))
        elif amount < 0:
            errors.append(FieldErrorSchema(field=to_camel_key(amount_field), reason=f"{label} cannot be negative"))
        else:
            disclosures[amount_field] = Disclosed(amount=amount)

    if errors:
        raise ValidationFailed(errors)
    return FinancialInfoSchema(monthly_salary=raw.monthly_salary, **disclosures)
