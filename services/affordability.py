"""
Affordability check run when an application is finalized.

The applicant may commit at most half of their net monthly income, over the full
term, to the loan principal. A lump other-credit obligation is spread evenly
across the term. The loan is affordable only if that ceiling strictly exceeds
the requested amount.
"""
from __future__ import annotations

from schemas.customer import AffordabilityAssessment, FinancialInfoSchema, LoanInfoSchema, disclosed_amount

AFFORDABILITY_RATIO = 0.5


def assess_affordability(loan: LoanInfoSchema, financial: FinancialInfoSchema) -> AffordabilityAssessment:
    amount = loan.amount
    terms = loan.terms
    salary = financial.monthly_salary
    additional = disclosed_amount(financial.additional_income)
    mortgage = disclosed_amount(financial.mortgage)
    other_credits = disclosed_amount(financial.other_credits)

    monthly_other_credits = other_credits / terms if terms > 0 else 0.0
    net_monthly_income = salary + additional - mortgage - monthly_other_credits
    max_affordable_loan = net_monthly_income * terms * AFFORDABILITY_RATIO

    return AffordabilityAssessment(
        amount=amount,
        terms=terms,
        monthly_salary=salary,
        additional_income=additional,
        mortgage=mortgage,
        other_credits=other_credits,
        monthly_other_credits=monthly_other_credits,
        net_monthly_income=net_monthly_income,
        max_affordable_loan=max_affordable_loan,
        affordable=max_affordable_loan > amount,
    )
