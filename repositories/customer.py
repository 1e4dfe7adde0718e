"""
Storage for customer applications.
The service only depends on the CustomerRepository protocol; the SQLAlchemy
implementation backs the API and the in-memory one backs tests and scripts.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Customer
from schemas.customer import CustomerSchema

_CATEGORY_COLUMNS = ("personal_info", "contact_info", "loan_info", "financial_info")


class CustomerRepository(Protocol):
    async def find_by_id(self, uid: str) -> Optional[CustomerSchema]:
        ...

    async def upsert(self, customer: CustomerSchema) -> None:
        ...

    async def load_all(self) -> list[CustomerSchema]:
        ...


def _row_to_schema(row: Customer) -> CustomerSchema:
    return CustomerSchema.model_validate({
        "uid": row.uid,
        "personal_info": row.personal_info,
        "contact_info": row.contact_info,
        "loan_info": row.loan_info,
        "financial_info": row.financial_info,
        "is_finalized": row.is_finalized,
    })


def _schema_to_columns(customer: CustomerSchema) -> dict[str, Any]:
    """JSON-ready column values (snake_case, dates as ISO strings)."""
    data = customer.model_dump(mode="json", by_alias=False)
    return {col: data[col] for col in (*_CATEGORY_COLUMNS, "is_finalized")}


class SqlAlchemyCustomerRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_row(self, uid: str) -> Optional[Customer]:
        result = await self.session.execute(select(Customer).where(Customer.uid == uid))
        return result.scalar_one_or_none()

    async def find_by_id(self, uid: str) -> Optional[CustomerSchema]:
        row = await self._get_row(uid)
        return _row_to_schema(row) if row else None

    async def upsert(self, customer: CustomerSchema) -> None:
        columns = _schema_to_columns(customer)
        now = datetime.now(timezone.utc)
        row = await self._get_row(customer.uid)
        if row is None:
            row = Customer(uid=customer.uid, created_at=now, updated_at=now, **columns)
            self.session.add(row)
        else:
            for key, value in columns.items():
                setattr(row, key, value)
            row.updated_at = now
        await self.session.flush()

    async def load_all(self) -> list[CustomerSchema]:
        result = await self.session.execute(select(Customer).order_by(Customer.created_at, Customer.uid))
        return [_row_to_schema(r) for r in result.scalars().all()]


class InMemoryCustomerRepository:
    """Dict-backed repository; stores copies so callers can't mutate stored records."""

    def __init__(self, customers: Optional[list[CustomerSchema]] = None):
        self._customers: dict[str, CustomerSchema] = {}
        self.upsert_count = 0
        for c in customers or []:
            self._customers[c.uid] = c.model_copy(deep=True)

    async def find_by_id(self, uid: str) -> Optional[CustomerSchema]:
        customer = self._customers.get(uid)
        return customer.model_copy(deep=True) if customer else None

    async def upsert(self, customer: CustomerSchema) -> None:
        self._customers[customer.uid] = customer.model_copy(deep=True)
        self.upsert_count += 1

    async def load_all(self) -> list[CustomerSchema]:
        return [c.model_copy(deep=True) for c in self._customers.values()]
