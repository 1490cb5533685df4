from fastapi import APIRouter, Depends, HTTPException, Request, status
import logging
from pydantic import BaseModel
from typing import Dict
from sqlalchemy.orm import Session
from orbit_core.auth import get_current_user, get_db
from orbit_core.models import User
from orbit_core.push import PushDispatcher, save_subscription

router = APIRouter(prefix="/api", tags=["push"])
log = logging.getLogger("orbit_api")


class SubscriptionBody(BaseModel):
    endpoint: str
    keys: Dict[str, str]


class SubscribeRequest(BaseModel):
    subscription: SubscriptionBody


def get_dispatcher(request: Request) -> PushDispatcher:
    return request.app.state.dispatcher


@router.get("/vapid-public-key")
def vapid_public_key(dispatcher: PushDispatcher = Depends(get_dispatcher)):
    return {"publicKey": dispatcher.settings.vapid_public_key, "enabled": dispatcher.enabled}


@router.post("/subscribe", status_code=status.HTTP_201_CREATED)
def subscribe(request: SubscribeRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        row = save_subscription(db, user.username, request.subscription.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": "Saved", "id": row.id}


@router.post("/send-test")
def send_test(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    dispatcher: PushDispatcher = Depends(get_dispatcher),
):
    sent = dispatcher.send_to_user(
        db,
        user.username,
        {"title": "Test", "message": "System Operational", "type": "test", "tag": "orbit-test", "url": "/"},
    )
    log.info("push.test user=%s sent=%d", user.username, sent)
    return {"success": True, "sent": sent}
