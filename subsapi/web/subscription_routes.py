# subsapi/web/subscription_routes.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from subsapi.services.auth_service import Identity
from subsapi.services.subscription_service import SubscriptionService
from subsapi.web.deps import get_identity, get_subscription_service
from subsapi.web.schemas import (
    Confirmation,
    SubscriptionCreate,
    SubscriptionOut,
    SubscriptionUpdate,
)

# every route here needs a valid bearer token
router = APIRouter(
    prefix="/api/subscriptions",
    tags=["subscriptions"],
    dependencies=[Depends(get_identity)],
)


@router.get("", response_model=List[SubscriptionOut])
async def subscriptions_by_user(
    user_id: int = Query(..., alias="userId"),
    svc: SubscriptionService = Depends(get_subscription_service),
):
    return await svc.get_by_user(user_id)


@router.get("/active", response_model=List[SubscriptionOut])
async def active_subscriptions(svc: SubscriptionService = Depends(get_subscription_service)):
    return await svc.get_active()


@router.get("/remaining-days", response_model=int)
async def remaining_days(
    subscription_id: int = Query(..., alias="subscriptionId"),
    svc: SubscriptionService = Depends(get_subscription_service),
):
    return await svc.remaining_days(subscription_id)


@router.post("", response_model=Confirmation)
async def create_subscription(
    body: SubscriptionCreate,
    identity: Identity = Depends(get_identity),
    svc: SubscriptionService = Depends(get_subscription_service),
):
    sub = await svc.create(identity, body.to_input())
    return Confirmation(message="Subscription created successfully", id=sub.id)


@router.put("", response_model=Confirmation)
async def update_subscription(
    body: SubscriptionUpdate,
    subscription_id: int = Query(..., alias="subscriptionId"),
    svc: SubscriptionService = Depends(get_subscription_service),
):
    sub = await svc.update(subscription_id, body.to_input())
    return Confirmation(message="Subscription updated successfully", id=sub.id)


@router.delete("", response_model=Confirmation)
async def delete_subscription(
    subscription_id: int = Query(..., alias="subscriptionId"),
    svc: SubscriptionService = Depends(get_subscription_service),
):
    await svc.delete(subscription_id)
    return Confirmation(message="Subscription deleted successfully", id=subscription_id)
