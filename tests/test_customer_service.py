"""
Tests for the customer application lifecycle against the in-memory repository.
Run from project root: python -m pytest tests/test_customer_service.py -v
"""
import unittest
from datetime import date

from repositories.customer import InMemoryCustomerRepository
from schemas.customer import (
    CustomerSchema,
    Disclosed,
    FinancialInfoSchema,
    LoanInfoSchema,
    NotDisclosed,
    PersonalInfoSchema,
)
from services.customer import CustomerService
from services.exceptions import AlreadyFinalized, NotFound, PreconditionFailed, Unaffordable, ValidationFailed

TODAY = date(2025, 6, 15)

PERSONAL = {"firstName": "Erika", "lastName": "Mustermann", "dateOfBirth": "1985-03-20"}
CONTACT = {"email": "erika@mustermann.de", "phone": "+4915112345678"}
LOAN = {"amount": 10_000, "upfront": 1_000, "terms": 10}
FINANCIAL = {
    "monthlySalary": 3000,
    "hasAdditionalIncome": False,
    "hasMortgage": False,
    "hasOtherCredits": False,
}


def _stored_customer(uid="c-1", *, loan=None, financial=None, finalized=False):
    return CustomerSchema(
        uid=uid,
        personal_info=PersonalInfoSchema(first_name="Erika", last_name="Mustermann", date_of_birth=date(1985, 3, 20)),
        loan_info=loan,
        financial_info=financial,
        is_finalized=finalized,
    )


class CustomerServiceTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.repo = InMemoryCustomerRepository()
        self.service = CustomerService(self.repo, today=lambda: TODAY)


class TestSavePersonalInfo(CustomerServiceTestCase):
    async def test_creates_customer_without_uid(self):
        customer = await self.service.save_personal_info(PERSONAL)
        self.assertTrue(customer.uid)
        self.assertFalse(customer.is_finalized)
        self.assertEqual(customer.personal_info, PersonalInfoSchema.model_validate(PERSONAL))
        self.assertEqual(await self.repo.find_by_id(customer.uid), customer)

    async def test_each_creation_gets_a_new_uid(self):
        uids = {(await self.service.save_personal_info(PERSONAL)).uid for _ in range(5)}
        self.assertEqual(len(uids), 5)

    async def test_updates_existing_customer_only_personal_info(self):
        created = await self.service.save_personal_info(PERSONAL)
        await self.service.save_contact_info(created.uid, CONTACT)

        updated = await self.service.save_personal_info({**PERSONAL, "lastName": "Musterfrau"}, created.uid)

        self.assertEqual(updated.uid, created.uid)
        self.assertEqual(updated.personal_info.last_name, "Musterfrau")
        self.assertEqual(updated.contact_info.phone, CONTACT["phone"])

    async def test_update_of_unknown_uid_is_not_found(self):
        with self.assertRaises(NotFound):
            await self.service.save_personal_info({}, "missing")

    async def test_invalid_input_writes_nothing(self):
        with self.assertRaises(ValidationFailed):
            await self.service.save_personal_info({**PERSONAL, "firstName": "Anna-Lena"})
        self.assertEqual(self.repo.upsert_count, 0)
        self.assertEqual(await self.service.find_all(), [])


class TestCategorySubmissions(CustomerServiceTestCase):
    async def test_unknown_uid_is_not_found_for_every_category(self):
        calls = (
            lambda: self.service.save_personal_info(PERSONAL, "missing"),
            lambda: self.service.save_contact_info("missing", CONTACT),
            lambda: self.service.save_loan_info("missing", LOAN),
            lambda: self.service.save_financial_info("missing", FINANCIAL),
        )
        for call in calls:
            with self.assertRaises(NotFound):
                await call()

    async def test_full_flow_accumulates_categories(self):
        uid = (await self.service.save_personal_info(PERSONAL)).uid
        await self.service.save_contact_info(uid, CONTACT)
        await self.service.save_loan_info(uid, LOAN)
        customer = await self.service.save_financial_info(uid, {**FINANCIAL, "hasMortgage": True, "mortgage": 400})

        self.assertEqual(customer.contact_info.email, CONTACT["email"])
        self.assertEqual(customer.loan_info, LoanInfoSchema(amount=10_000, upfront=1_000, terms=10))
        self.assertEqual(customer.financial_info.mortgage, Disclosed(amount=400))
        self.assertIsInstance(customer.financial_info.other_credits, NotDisclosed)
        self.assertEqual(await self.service.find_one(uid), customer)

    async def test_loan_term_checked_against_stored_age(self):
        uid = (await self.service.save_personal_info({**PERSONAL, "dateOfBirth": "1947-06-15"})).uid
        with self.assertRaises(ValidationFailed) as ctx:
            await self.service.save_loan_info(uid, {**LOAN, "terms": 24})
        self.assertEqual([e.field for e in ctx.exception.errors], ["terms"])
        self.assertIsNone((await self.service.find_one(uid)).loan_info)

        customer = await self.service.save_loan_info(uid, {**LOAN, "terms": 12})
        self.assertEqual(customer.loan_info.terms, 12)

    async def test_categories_accepted_in_any_order(self):
        uid = (await self.service.save_personal_info(PERSONAL)).uid
        await self.service.save_financial_info(uid, FINANCIAL)
        await self.service.save_loan_info(uid, LOAN)
        customer = await self.service.finalize(uid)
        self.assertTrue(customer.is_finalized)
        self.assertIsNone(customer.contact_info)

    async def test_finalized_customer_cannot_be_changed(self):
        self.repo = InMemoryCustomerRepository([_stored_customer(finalized=True)])
        self.service = CustomerService(self.repo, today=lambda: TODAY)
        calls = (
            lambda: self.service.save_personal_info(PERSONAL, "c-1"),
            lambda: self.service.save_contact_info("c-1", CONTACT),
            lambda: self.service.save_loan_info("c-1", LOAN),
            lambda: self.service.save_financial_info("c-1", FINANCIAL),
        )
        for call in calls:
            with self.assertRaises(AlreadyFinalized):
                await call()
        self.assertEqual(self.repo.upsert_count, 0)


class TestFinalize(CustomerServiceTestCase):
    def _use(self, *customers):
        self.repo = InMemoryCustomerRepository(list(customers))
        self.service = CustomerService(self.repo, today=lambda: TODAY)

    async def test_unknown_uid_is_not_found(self):
        with self.assertRaises(NotFound):
            await self.service.finalize("missing")

    async def test_requires_loan_and_financial_info(self):
        self._use(
            _stored_customer("none"),
            _stored_customer("loan-only", loan=LoanInfoSchema(amount=10_000, upfront=0, terms=12)),
            _stored_customer("financial-only", financial=FinancialInfoSchema(monthly_salary=2000)),
        )
        expected_missing = {
            "none": ["loanInfo", "financialInfo"],
            "loan-only": ["financialInfo"],
            "financial-only": ["loanInfo"],
        }
        for uid, missing in expected_missing.items():
            with self.assertRaises(PreconditionFailed) as ctx:
                await self.service.finalize(uid)
            self.assertEqual(ctx.exception.missing, missing)
        self.assertEqual(self.repo.upsert_count, 0)

    async def test_affordable_loan_is_finalized(self):
        self._use(_stored_customer(
            loan=LoanInfoSchema(amount=1000, upfront=0, terms=12),
            financial=FinancialInfoSchema(monthly_salary=2000),
        ))
        customer = await self.service.finalize("c-1")
        self.assertTrue(customer.is_finalized)
        self.assertTrue((await self.repo.find_by_id("c-1")).is_finalized)

    async def test_unaffordable_loan_is_rejected_with_figures(self):
        self._use(_stored_customer(
            loan=LoanInfoSchema(amount=10_000, upfront=0, terms=10),
            financial=FinancialInfoSchema(monthly_salary=100),
        ))
        with self.assertRaises(Unaffordable) as ctx:
            await self.service.finalize("c-1")
        self.assertEqual(ctx.exception.net_monthly_income, 100)
        self.assertEqual(ctx.exception.max_affordable_loan, 500)
        self.assertEqual(ctx.exception.amount, 10_000)
        self.assertIn("€100.00", ctx.exception.message)
        self.assertFalse((await self.repo.find_by_id("c-1")).is_finalized)
        self.assertEqual(self.repo.upsert_count, 0)

    async def test_finalize_is_idempotent(self):
        self._use(_stored_customer(
            loan=LoanInfoSchema(amount=1000, upfront=0, terms=12),
            financial=FinancialInfoSchema(monthly_salary=2000),
        ))
        first = await self.service.finalize("c-1")
        second = await self.service.finalize("c-1")
        self.assertEqual(first, second)
        self.assertTrue(second.is_finalized)
        self.assertEqual(self.repo.upsert_count, 1)

    async def test_assess_previews_without_finalizing(self):
        self._use(_stored_customer(
            loan=LoanInfoSchema(amount=20_000, upfront=0, terms=24),
            financial=FinancialInfoSchema(monthly_salary=3000, other_credits=Disclosed(amount=1200)),
        ))
        assessment = await self.service.assess("c-1")
        self.assertEqual(assessment.net_monthly_income, 2950)
        self.assertTrue(assessment.affordable)
        self.assertFalse((await self.repo.find_by_id("c-1")).is_finalized)
        self.assertEqual(self.repo.upsert_count, 0)


class TestQueries(CustomerServiceTestCase):
    async def test_find_one_unknown_uid(self):
        with self.assertRaises(NotFound):
            await self.service.find_one("missing")

    async def test_find_all_returns_every_customer(self):
        created = [await self.service.save_personal_info(PERSONAL) for _ in range(3)]
        found = await self.service.find_all()
        self.assertEqual({c.uid for c in found}, {c.uid for c in created})


if __name__ == "__main__":
    unittest.main()
