# api/webhooks.py
from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth_utils import require_service_key
from core.database import get_async_session
from models.repository import SqlUserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/polka", tags=["webhooks"])

UPGRADE_EVENT = "user.upgraded"


class WebhookData(BaseModel):
    user_id: str = ""

class PolkaWebhook(BaseModel):
    event: str
    data: WebhookData = Field(default_factory=WebhookData)


async def _parse_webhook(request: Request) -> tuple[PolkaWebhook, uuid.UUID]:
    # any body we cannot make sense of is a 400, not a 422
    try:
        req = PolkaWebhook.model_validate(await request.json())
        return req, uuid.UUID(req.data.user_id)
    except (ValueError, ValidationError):
        raise HTTPException(status_code=400, detail="Invalid webhook payload")


@router.post("/webhooks", status_code=204, dependencies=[Depends(require_service_key)])
async def polka_webhook(request: Request, session: AsyncSession = Depends(get_async_session)):
    req, user_id = await _parse_webhook(request)

    if req.event == UPGRADE_EVENT:
        if not await SqlUserRepository(session).upgrade_user(user_id):
            raise HTTPException(status_code=404, detail="User not found")
        logger.info("user %s upgraded", user_id)

    return Response(status_code=204)
