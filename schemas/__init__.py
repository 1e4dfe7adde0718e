from schemas.customer import (
    AffordabilityAssessment,
    ContactInfoSchema,
    CustomerSchema,
    Disclosed,
    FieldErrorSchema,
    FinancialInfoInput,
    FinancialInfoSchema,
    LoanInfoSchema,
    NotDisclosed,
    PersonalInfoSchema,
)

__all__ = [
    "AffordabilityAssessment",
    "ContactInfoSchema",
    "CustomerSchema",
    "Disclosed",
    "FieldErrorSchema",
    "FinancialInfoInput",
    "FinancialInfoSchema",
    "LoanInfoSchema",
    "NotDisclosed",
    "PersonalInfoSchema",
]
