"""
Customer application lifecycle: create on the first personal-info step, merge each
validated step into the record, and finalize once the loan is affordable.
"""
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Callable, Mapping, Optional

from repositories.customer import CustomerRepository
from schemas.customer import AffordabilityAssessment, CustomerSchema
from services.affordability import assess_affordability
from services.exceptions import AlreadyFinalized, NotFound, PreconditionFailed, Unaffordable
from services.validation import (
    validate_contact_info,
    validate_financial_info,
    validate_loan_info,
    validate_personal_info,
)

logger = logging.getLogger(__name__)


def _new_uid() -> str:
    return str(uuid.uuid4())


class CustomerService:

    def __init__(
        self,
        repository: CustomerRepository,
        uid_factory: Callable[[], str] = _new_uid,
        today: Optional[Callable[[], date]] = None,
    ):
        self.repository = repository
        self.uid_factory = uid_factory
        self._today = today or date.today

    async def save_personal_info(self, data: Mapping[str, Any], uid: Optional[str] = None) -> CustomerSchema:
        """
        Without a uid, create a new customer from the personal info.
        With a uid, replace the personal info of that existing customer.
        """
        if uid is None:
            personal_info = validate_personal_info(data, today=self._today())
            customer = CustomerSchema(uid=self.uid_factory(), is_finalized=False, personal_info=personal_info)
            await self.repository.upsert(customer)
            logger.info("Created customer %s", customer.uid)
            return customer

        customer = await self._get_editable(uid)
        customer.personal_info = validate_personal_info(data, today=self._today())
        await self.repository.upsert(customer)
        logger.info("Updated personal info for customer %s", uid)
        return customer

    async def save_contact_info(self, uid: str, data: Mapping[str, Any]) -> CustomerSchema:
        customer = await self._get_editable(uid)
        customer.contact_info = validate_contact_info(data)
        await self.repository.upsert(customer)
        logger.info("Updated contact info for customer %s", uid)
        return customer

    async def save_loan_info(self, uid: str, data: Mapping[str, Any]) -> CustomerSchema:
        """Save the loan step; the term is checked against the age on record when known."""
        customer = await self._get_editable(uid)
        date_of_birth = customer.personal_info.date_of_birth if customer.personal_info else None
        customer.loan_info = validate_loan_info(data, date_of_birth=date_of_birth, today=self._today())
        await self.repository.upsert(customer)
        logger.info("Updated loan info for customer %s", uid)
        return customer

    async def save_financial_info(self, uid: str, data: Mapping[str, Any]) -> CustomerSchema:
        customer = await self._get_editable(uid)
        customer.financial_info = validate_financial_info(data)
        await self.repository.upsert(customer)
        logger.info("Updated financial info for customer %s", uid)
        return customer

    async def assess(self, uid: str) -> AffordabilityAssessment:
        """Run the affordability check without finalizing."""
        customer = await self.find_one(uid)
        return self._assess(customer)

    async def finalize(self, uid: str) -> CustomerSchema:
        """
        Finalize the application if the loan is affordable.
        Finalizing an already finalized customer returns it unchanged.
        Raises PreconditionFailed when loan or financial info is missing and
        Unaffordable when the income does not cover the requested amount.
        """
        customer = await self.find_one(uid)
        if customer.is_finalized:
            logger.info("Customer %s already finalized", uid)
            return customer

        assessment = self._assess(customer)
        if not assessment.affordable:
            logger.warning(
                "Rejected finalization for customer %s: max affordable %.2f vs amount %d",
                uid, assessment.max_affordable_loan, assessment.amount,
            )
            raise Unaffordable(
                net_monthly_income=assessment.net_monthly_income,
                max_affordable_loan=assessment.max_affordable_loan,
                amount=assessment.amount,
            )

        customer.is_finalized = True
        await self.repository.upsert(customer)
        logger.info("Finalized customer %s", uid)
        return customer

    async def find_one(self, uid: str) -> CustomerSchema:
        customer = await self.repository.find_by_id(uid)
        if customer is None:
            raise NotFound(uid)
        return customer

    async def find_all(self) -> list[CustomerSchema]:
        return await self.repository.load_all()

    async def _get_editable(self, uid: str) -> CustomerSchema:
        customer = await self.find_one(uid)
        if customer.is_finalized:
            raise AlreadyFinalized(uid)
        return customer

    @staticmethod
    def _assess(customer: CustomerSchema) -> AffordabilityAssessment:
        missing = [
            name
            for name, value in (("loanInfo", customer.loan_info), ("financialInfo", customer.financial_info))
            if value is None
        ]
        if missing:
            raise PreconditionFailed(missing)
        return assess_affordability(customer.loan_info, customer.financial_info)
