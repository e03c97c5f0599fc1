"""GitHub webhook router."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, Header

from pkgcheck.api.deps import get_synchronizer
from pkgcheck.api.schemas.webhook import CheckRunEvent, CheckSuiteEvent, WebhookAck
from pkgcheck.engines.check_sync import CheckSuiteTrigger, CheckSynchronizer

log = structlog.get_logger("pkgcheck.api")

router = APIRouter()

_SUITE_ACTIONS = frozenset({"requested", "rerequested"})


def to_trigger(event: str, payload: dict[str, Any]) -> CheckSuiteTrigger | None:
    """Map a delivery to a trigger; None for events the bot does not handle."""
    if event == "check_suite" and payload.get("action") in _SUITE_ACTIONS:
        return CheckSuiteEvent.model_validate(payload).to_trigger()
    if event == "check_run" and payload.get("action") == "rerequested":
        return CheckRunEvent.model_validate(payload).to_trigger()
    return None


@router.post("/github", response_model=WebhookAck)
async def github_webhook(
    payload: dict[str, Any] = Body(...),
    x_github_event: str = Header(...),
    x_github_delivery: str | None = Header(None),
    sync: CheckSynchronizer = Depends(get_synchronizer),
) -> WebhookAck:
    tokens = structlog.contextvars.bind_contextvars(
        delivery_id=x_github_delivery, event=x_github_event
    )
    try:
        trigger = to_trigger(x_github_event, payload)
        if trigger is None:
            log.debug("webhook.ignored", action=payload.get("action"))
            return WebhookAck(status="ignored")

        response = await sync.handle_trigger(trigger)
        return WebhookAck(
            status="accepted",
            check_run_id=response.get("id"),
            conclusion=response.get("conclusion"),
        )
    finally:
        structlog.contextvars.reset_contextvars(**tokens)
