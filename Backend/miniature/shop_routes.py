"""
Shop API (all routes require a bearer token).

Usage:
    POST   /v1/shop            -> Create a shop owned by the caller (role-gated)
    GET    /v1/shop/my         -> List the caller's shops
    GET    /v1/shop/{shop_id}  -> Get one shop
    PUT    /v1/shop/{shop_id}  -> Partial update (owner only)
    DELETE /v1/shop/{shop_id}  -> Delete (owner only)
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from .core.config import get_settings
from .core.db import get_session
from .core.request_context import RequestContext, get_request_context, require_role
from .core.responses import ERROR_RESPONSES
from .domain import ShopChanges
from .repositories.sql import SqlShopRepository
from .services.shops import ShopService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/shop", tags=["shop"], responses=ERROR_RESPONSES)


# ────────────────────────────────────────────────────────────────
# Request / Response Models
# ────────────────────────────────────────────────────────────────

class CreateShopRequest(BaseModel):
    name: str
    address: Optional[str] = None


class UpdateShopRequest(BaseModel):
    """Partial update; send "address": null to clear the address."""
    name: Optional[str] = None
    address: Optional[str] = None
    is_active: Optional[bool] = None


class ShopResponse(BaseModel):
    id: uuid.UUID
    name: str
    owner_id: uuid.UUID
    address: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime
    version: int

    model_config = {"from_attributes": True}


# ────────────────────────────────────────────────────────────────
# Dependencies
# ────────────────────────────────────────────────────────────────

async def get_shop_service(session: AsyncSession = Depends(get_session)) -> ShopService:
    return ShopService(SqlShopRepository(session))


# ────────────────────────────────────────────────────────────────
# Endpoints
# ────────────────────────────────────────────────────────────────

@router.post("", response_model=ShopResponse, status_code=201)
async def create_shop(
    request: CreateShopRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: ShopService = Depends(get_shop_service),
):
    require_role(ctx, get_settings().shop_creator_roles_list)
    shop = await service.create(request.name, ctx.user_id, request.address)
    return ShopResponse.model_validate(shop)


# Declared before /{shop_id} so "my" is not parsed as an id
@router.get("/my", response_model=list[ShopResponse])
async def list_my_shops(
    ctx: RequestContext = Depends(get_request_context),
    service: ShopService = Depends(get_shop_service),
):
    shops = await service.list_by_owner(ctx.user_id)
    return [ShopResponse.model_validate(shop) for shop in shops]


@router.get("/{shop_id}", response_model=ShopResponse)
async def get_shop(
    shop_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ShopService = Depends(get_shop_service),
):
    shop = await service.get_by_id(shop_id)
    return ShopResponse.model_validate(shop)


@router.put("/{shop_id}", response_model=ShopResponse)
async def update_shop(
    shop_id: str,
    request: UpdateShopRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: ShopService = Depends(get_shop_service),
):
    changes = ShopChanges(**request.model_dump(exclude_unset=True))
    shop = await service.update(shop_id, ctx.user_id, changes)
    return ShopResponse.model_validate(shop)


@router.delete("/{shop_id}", status_code=204)
async def delete_shop(
    shop_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ShopService = Depends(get_shop_service),
):
    await service.delete(shop_id, ctx.user_id)
    return Response(status_code=204)
