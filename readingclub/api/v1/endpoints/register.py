"""
Registration, pricing, and the payment processor webhook.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from readingclub.api.v1.deps import get_billing_service
from readingclub.core.config import settings
from readingclub.core.pricing import PRICE_TIERS
from readingclub.schemas.user import RegisterRequest, RegisterResponse, UserRead
from readingclub.services.billing import BillingService

router = APIRouter(tags=["billing"])
logger = logging.getLogger(__name__)


@router.get("/pricing")
async def pricing() -> dict:
    """Public price list shown on the registration form."""
    return {
        "billing_starts": settings.BILLING_CUTOVER_DATE.isoformat(),
        "tiers": [
            {
                "country": t.country,
                "currency": t.currency,
                "monthly_price": t.monthly_price,
            }
            for t in PRICE_TIERS.values()
        ],
    }


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    body: RegisterRequest,
    billing: BillingService = Depends(get_billing_service),
) -> RegisterResponse:
    """Create the account once the client has a tokenized payment method.

    No charge happens here.
    """
    user = await billing.register(body)
    return RegisterResponse(user=UserRead.model_validate(user))


@router.post("/webhooks/payments")
async def payment_webhook(
    request: Request,
    billing: BillingService = Depends(get_billing_service),
) -> dict:
    """Processor events, read as raw bytes rather than a parsed JSON model."""
    raw = await request.body()
    return await billing.handle_event(raw)
