"""
Customer use-case: registration, phone login and profile updates.

Authentication is phone-possession only (no password). A token is issued
only after authenticate() found an active customer.
"""

import logging
import math
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..core.errors import InvalidArgument, NotFound
from ..domain import Customer, CustomerChanges, parse_identity, utcnow
from ..repositories.base import CustomerRepository
from ..token import TokenIssuer

logger = logging.getLogger(__name__)


def _require_text(value, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{field_name} is required")
    return value.strip()


def _require_non_negative(value, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgument(f"{field_name} must be a number")
    if not math.isfinite(value) or value < 0:
        raise InvalidArgument(f"{field_name} cannot be negative")
    return float(value)


class CustomerService:
    def __init__(self, repo: CustomerRepository, issuer: Optional[TokenIssuer] = None):
        self.repo = repo
        self.issuer = issuer

    async def register(self, phone: str, name: str, role: str) -> Customer:
        customer = Customer(
            id=uuid.uuid4(),
            phone=_require_text(phone, "phone"),
            name=_require_text(name, "name"),
            role=_require_text(role, "role"),
            total_spent=0.0,
            cashback_balance=0.0,
            is_active=True,
            created_at=utcnow(),
        )
        # Duplicate phone surfaces from the repository as ConstraintViolation
        await self.repo.create(customer)
        logger.info(f"Customer registered: {customer.id} ({customer.role})")
        return customer

    async def authenticate(self, phone: str) -> Customer:
        customer = await self.repo.get_by_phone(_require_text(phone, "phone"))
        if customer is None or not customer.is_active:
            logger.warning("Login failed: no active customer for the given phone")
            raise NotFound("customer not found")
        return customer

    async def login(self, phone: str) -> tuple[Customer, str, datetime]:
        """Authenticate by phone and issue a token; returns (customer, token, expires_at)."""
        if self.issuer is None:
            raise RuntimeError("CustomerService.login requires a TokenIssuer")
        customer = await self.authenticate(phone)
        issued_at = utcnow()
        token = self.issuer.issue(str(customer.id), customer.role, now=issued_at)
        logger.info(f"Customer logged in: {customer.id}")
        return customer, token, issued_at + self.issuer.config.ttl

    async def get_by_id(self, customer_id) -> Customer:
        customer = await self.repo.get_by_id(parse_identity(customer_id, "customer_id"))
        if customer is None:
            raise NotFound("customer not found")
        return customer

    async def update(self, customer_id, changes: CustomerChanges) -> Customer:
        """
        Apply the provided fields to a customer.

        Does not check who is asking; callers decide whether the subject may
        touch this customer.
        """
        customer = await self.get_by_id(customer_id)
        provided = changes.provided()
        if not provided:
            return customer

        updates = {}
        for name in ("name", "phone", "role"):
            if name in provided:
                updates[name] = _require_text(provided[name], name)
        for name in ("total_spent", "cashback_balance"):
            if name in provided:
                updates[name] = _require_non_negative(provided[name], name)
        if "is_active" in provided:
            if not isinstance(provided["is_active"], bool):
                raise InvalidArgument("is_active must be a boolean")
            updates["is_active"] = provided["is_active"]

        updated = replace(customer, **updates)
        await self.repo.update(updated)
        logger.info(f"Customer updated: {updated.id} fields={sorted(updates)}")
        return updated
