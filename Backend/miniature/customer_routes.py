"""
Customer API.

Usage:
    POST /v1/customer/register  -> Register a customer (phone, name, role)
    POST /v1/customer/login     -> Exchange a registered phone for a bearer token
    POST /v1/customer/logout    -> Stateless; the client discards its token
    GET  /v1/customer/me        -> Profile of the token's subject (requires auth)
    PUT  /v1/customer/me        -> Update name/phone of the token's subject (requires auth)
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from .core.db import get_session
from .core.errors import NotFound, Unauthenticated
from .core.request_context import RequestContext, get_request_context
from .core.responses import ERROR_RESPONSES
from .domain import CustomerChanges
from .repositories.sql import SqlCustomerRepository
from .services.customers import CustomerService
from .token import get_token_issuer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/customer", tags=["customer"], responses=ERROR_RESPONSES)


# === Request/Response Models ===

class RegisterRequest(BaseModel):
    phone: str
    name: str
    role: str


class LoginRequest(BaseModel):
    phone: str


class UpdateMeRequest(BaseModel):
    """Only fields present in the body are applied."""
    name: Optional[str] = None
    phone: Optional[str] = None


class CustomerResponse(BaseModel):
    id: uuid.UUID
    phone: str
    name: str
    role: str
    total_spent: float
    cashback_balance: float
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_at: datetime


class MessageResponse(BaseModel):
    message: str


# === Dependencies ===

async def get_customer_service(
    session: AsyncSession = Depends(get_session),
) -> CustomerService:
    return CustomerService(SqlCustomerRepository(session), get_token_issuer())


# === Endpoints ===

@router.post("/register", response_model=CustomerResponse, status_code=201)
async def register(
    request: RegisterRequest,
    service: CustomerService = Depends(get_customer_service),
):
    customer = await service.register(request.phone, request.name, request.role)
    return CustomerResponse.model_validate(customer)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    service: CustomerService = Depends(get_customer_service),
):
    try:
        _, token, expires_at = await service.login(request.phone)
    except NotFound as e:
        # Unknown phone is an authentication failure from the client's view
        raise Unauthenticated("user not found") from e
    return LoginResponse(token=token, expires_at=expires_at)


@router.post("/logout", response_model=MessageResponse)
async def logout():
    return MessageResponse(message="logout successful. Just discard the token on client side.")


@router.get("/me", response_model=CustomerResponse)
async def me(
    ctx: RequestContext = Depends(get_request_context),
    service: CustomerService = Depends(get_customer_service),
):
    customer = await service.get_by_id(ctx.user_id)
    return CustomerResponse.model_validate(customer)


@router.put("/me", response_model=CustomerResponse)
async def update_me(
    request: UpdateMeRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: CustomerService = Depends(get_customer_service),
):
    # The subject may only edit itself: the target id comes from the token
    changes = CustomerChanges(**request.model_dump(exclude_unset=True))
    customer = await service.update(ctx.user_id, changes)
    return CustomerResponse.model_validate(customer)
