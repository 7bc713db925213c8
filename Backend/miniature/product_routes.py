"""
Product API (all routes require a bearer token).

Reads are open to any authenticated subject; writes require owning the
product's shop, which ProductService checks through the ownership checker.

Usage:
    POST   /v1/shops/{shop_id}/products  -> Add a product to a shop
    GET    /v1/shops/{shop_id}/products  -> List a shop's products
    GET    /v1/products/{product_id}     -> Get one product
    PUT    /v1/products/{product_id}     -> Partial update
    DELETE /v1/products/{product_id}     -> Delete
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from .core.db import get_session
from .core.request_context import RequestContext, get_request_context
from .core.responses import ERROR_RESPONSES
from .domain import ProductChanges
from .repositories.sql import SqlProductRepository, SqlShopOwnershipChecker
from .services.products import ProductService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["product"], responses=ERROR_RESPONSES)


# === Request/Response Models ===

class CreateProductRequest(BaseModel):
    name: str
    description: str = ""
    price: float = Field(..., allow_inf_nan=False)
    sku: str = ""
    stock_quantity: int = 0


class UpdateProductRequest(BaseModel):
    """Only fields present in the body are applied; explicit nulls are rejected."""
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, allow_inf_nan=False)
    sku: Optional[str] = None
    stock_quantity: Optional[int] = None
    is_active: Optional[bool] = None


class ProductResponse(BaseModel):
    id: uuid.UUID
    shop_id: uuid.UUID
    name: str
    description: str
    price: float
    sku: str
    stock_quantity: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
    version: int

    model_config = {"from_attributes": True}


# === Dependencies ===

async def get_product_service(session: AsyncSession = Depends(get_session)) -> ProductService:
    return ProductService(SqlProductRepository(session), SqlShopOwnershipChecker(session))


# === Endpoints ===

@router.post("/shops/{shop_id}/products", response_model=ProductResponse, status_code=201)
async def create_product(
    shop_id: str,
    request: CreateProductRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: ProductService = Depends(get_product_service),
):
    product = await service.create(
        shop_id,
        name=request.name,
        description=request.description,
        price=request.price,
        sku=request.sku,
        stock_quantity=request.stock_quantity,
        requester_id=ctx.user_id,
    )
    return ProductResponse.model_validate(product)


@router.get("/shops/{shop_id}/products", response_model=list[ProductResponse])
async def list_products(
    shop_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ProductService = Depends(get_product_service),
):
    products = await service.list_by_shop(shop_id)
    return [ProductResponse.model_validate(product) for product in products]


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ProductService = Depends(get_product_service),
):
    product = await service.get_by_id(product_id)
    return ProductResponse.model_validate(product)


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    request: UpdateProductRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: ProductService = Depends(get_product_service),
):
    changes = ProductChanges(**request.model_dump(exclude_unset=True))
    product = await service.update(product_id, changes, ctx.user_id)
    return ProductResponse.model_validate(product)


@router.delete("/products/{product_id}", status_code=204)
async def delete_product(
    product_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ProductService = Depends(get_product_service),
):
    await service.delete(product_id, ctx.user_id)
    return Response(status_code=204)
