"""
Failures raised by the customer service.
Each carries an HTTP status and a structured payload; the API layer renders them as-is.
"""
from __future__ import annotations

from typing import Any

from schemas.customer import FieldErrorSchema


class CustomerServiceError(Exception):
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def payload(self) -> dict[str, Any]:
        """Extra structured detail returned alongside the message."""
        return {}


class ValidationFailed(CustomerServiceError):
    status_code = 400

    def __init__(self, errors: list[FieldErrorSchema]):
        if not errors:
            raise ValueError("ValidationFailed requires at least one field error")
        self.errors = list(errors)
        super().__init__("; ".join(f"{e.field}: {e.reason}" for e in self.errors))

    def payload(self) -> dict[str, Any]:
        return {"errors": [e.model_dump() for e in self.errors]}


class NotFound(CustomerServiceError):
    status_code = 404

    def __init__(self, uid: str):
        self.uid = uid
        super().__init__(f"Customer with id {uid} not found")


class AlreadyFinalized(CustomerServiceError):
    status_code = 409

    def __init__(self, uid: str):
        self.uid = uid
        super().__init__(f"Customer with id {uid} is already finalized and can no longer be changed")


class PreconditionFailed(CustomerServiceError):
    status_code = 400

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__("Loan and financial information must be provided before finalizing")

    def payload(self) -> dict[str, Any]:
        return {"missing": self.missing}


class Unaffordable(CustomerServiceError):
    status_code = 400

    def __init__(self, net_monthly_income: float, max_affordable_loan: float, amount: int):
        self.net_monthly_income = net_monthly_income
        self.max_affordable_loan = max_affordable_loan
        self.amount = amount
        super().__init__(
            f"Insufficient income. Your net monthly income (€{net_monthly_income:.2f}) is too low "
            "for this loan amount. Please reduce the loan amount or restart with a new person."
        )

    def payload(self) -> dict[str, Any]:
        return {
            "net_monthly_income": round(self.net_monthly_income, 2),
            "max_affordable_loan": round(self.max_affordable_loan, 2),
            "amount": self.amount,
        }
