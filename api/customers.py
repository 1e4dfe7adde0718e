from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from repositories.customer import SqlAlchemyCustomerRepository
from schemas.customer import CustomerSchema
from services.customer import CustomerService
from utils.case import dict_keys_to_camel

router = APIRouter(prefix="/api/customers", tags=["customers"])


def get_customer_service(db: AsyncSession = Depends(get_db)) -> CustomerService:
    return CustomerService(SqlAlchemyCustomerRepository(db))


def _customer_to_response(customer: CustomerSchema) -> dict[str, Any]:
    """Serialize customer to dict with camelCase for frontend."""
    data = customer.model_dump(mode="json", by_alias=False, exclude={"financial_info"})
    if customer.financial_info:
        data["financial_info"] = customer.financial_info.to_flat_dict()
    else:
        data["financial_info"] = None
    return dict_keys_to_camel(data)


@router.get("")
async def list_customers(service: CustomerService = Depends(get_customer_service)):
    customers = await service.find_all()
    return [_customer_to_response(c) for c in customers]


@router.post("/personal-info", status_code=201)
async def save_personal_info(
    response: Response,
    body: dict[str, Any] = Body(...),
    uid: Optional[str] = Query(None, description="Existing customer to update; omit to create a new one"),
    service: CustomerService = Depends(get_customer_service),
):
    # An empty ?uid= means "create", like an omitted one
    uid = uid or None
    customer = await service.save_personal_info(body, uid)
    if uid is not None:
        response.status_code = 200
    return _customer_to_response(customer)


@router.patch("/{uid}/contact-info")
async def save_contact_info(
    uid: str,
    body: dict[str, Any] = Body(...),
    service: CustomerService = Depends(get_customer_service),
):
    return _customer_to_response(await service.save_contact_info(uid, body))


@router.patch("/{uid}/loan-info")
async def save_loan_info(
    uid: str,
    body: dict[str, Any] = Body(...),
    service: CustomerService = Depends(get_customer_service),
):
    return _customer_to_response(await service.save_loan_info(uid, body))


@router.patch("/{uid}/financial-info")
async def save_financial_info(
    uid: str,
    body: dict[str, Any] = Body(...),
    service: CustomerService = Depends(get_customer_service),
):
    return _customer_to_response(await service.save_financial_info(uid, body))


@router.get("/{uid}/affordability")
async def get_affordability(uid: str, service: CustomerService = Depends(get_customer_service)):
    assessment = await service.assess(uid)
    return dict_keys_to_camel(assessment.model_dump())


@router.patch("/{uid}/finalize")
async def finalize_customer(uid: str, service: CustomerService = Depends(get_customer_service)):
    return _customer_to_response(await service.finalize(uid))


@router.get("/{uid}")
async def get_customer(uid: str, service: CustomerService = Depends(get_customer_service)):
    return _customer_to_response(await service.find_one(uid))
