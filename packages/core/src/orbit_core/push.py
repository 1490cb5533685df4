"""Web Push delivery to the subscriptions stored for a user."""
from __future__ import annotations

import json
import logging
from typing import Callable, Optional

from pywebpush import WebPushException, webpush
from sqlalchemy.orm import Session

from orbit_core.config import Settings
from orbit_core.models import PushSubscription

logger = logging.getLogger("orbit_core.push")

Sender = Callable[[dict, str], None]

# Push services answer 404/410 once a subscription has been revoked
GONE_STATUSES = (404, 410)


def save_subscription(db: Session, username: str, subscription: dict) -> PushSubscription:
    """Upsert a browser subscription on (username, endpoint)."""
    endpoint = subscription.get("endpoint")
    keys = subscription.get("keys") or {}
    if not endpoint or not keys.get("p256dh") or not keys.get("auth"):
        raise ValueError("subscription needs an endpoint and p256dh/auth keys")
    row = (
        db.query(PushSubscription)
        .filter(PushSubscription.username == username, PushSubscription.endpoint == endpoint)
        .first()
    )
    if row is None:
        row = PushSubscription(username=username, endpoint=endpoint, keys=keys)
        db.add(row)
    else:
        row.keys = keys
    db.commit()
    db.refresh(row)
    logger.info("push.subscribe ok user=%s id=%s", username, row.id)
    return row


class PushDispatcher:
    """Send JSON payloads to every subscription a user has registered.

    Without VAPID keys (and without an injected sender) push is disabled and
    sends become no-ops; the rest of the app keeps working.
    """

    def __init__(self, settings: Optional[Settings] = None, sender: Optional[Sender] = None):
        self.settings = settings or Settings()
        self._sender = sender
        self._warned_disabled = False

    @property
    def enabled(self) -> bool:
        return self._sender is not None or self.settings.push_enabled

    def _send(self, subscription_info: dict, data: str) -> None:
        if self._sender is not None:
            self._sender(subscription_info, data)
            return
        webpush(
            subscription_info=subscription_info,
            data=data,
            vapid_private_key=self.settings.vapid_private_key,
            vapid_claims={"sub": self.settings.vapid_email},
        )

    def send_to_user(self, db: Session, username: str, payload: dict) -> int:
        """Deliver ``payload`` to each of the user's subscriptions.

        Returns how many sends succeeded. Expired subscriptions are pruned;
        other failures are logged and skipped.
        """
        if not self.enabled:
            if not self._warned_disabled:
                logger.warning("push.disabled: VAPID keys missing; push notifications off")
                self._warned_disabled = True
            return 0
        subs = db.query(PushSubscription).filter(PushSubscription.username == username).all()
        if not subs:
            return 0
        data = json.dumps(payload)
        sent = 0
        for sub in subs:
            try:
                self._send({"endpoint": sub.endpoint, "keys": sub.keys}, data)
                sent += 1
            except WebPushException as e:
                status = getattr(e.response, "status_code", None)
                if status in GONE_STATUSES:
                    logger.info("push.prune id=%s user=%s status=%s", sub.id, username, status)
                    db.delete(sub)
                else:
                    logger.error("push.send failed id=%s user=%s status=%s", sub.id, username, status)
            except Exception:
                logger.error("push.send error id=%s user=%s", sub.id, username, exc_info=True)
        db.commit()
        if sent:
            logger.info("push.sent title=%r user=%s count=%d", payload.get("title"), username, sent)
        return sent


__all__ = ["PushDispatcher", "save_subscription", "GONE_STATUSES"]
