# FILE: studio/webhooks/router.py
"""
Inbound webhook receivers. Events are logged and acknowledged only.
Any JSON body is accepted, not just objects.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Header

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


def _ack(source: str) -> Dict[str, Any]:
    return {"received": True, "source": source}


def _keys(payload: Any) -> List[str]:
    return sorted(payload.keys()) if isinstance(payload, dict) else []


@router.post("/github")
def github_webhook(
    payload: Optional[Any] = Body(None),
    x_github_event: Optional[str] = Header(None, alias="X-GitHub-Event"),
):
    repo = None
    if isinstance(payload, dict) and isinstance(payload.get("repository"), dict):
        repo = payload["repository"].get("full_name")
    logger.info("[webhooks] GitHub event=%s repo=%s", x_github_event or "unknown", repo)
    return _ack("github")


@router.post("/cicd")
def cicd_webhook(payload: Optional[Any] = Body(None)):
    logger.info("[webhooks] CI/CD event keys=%s", _keys(payload))
    return _ack("cicd")


@router.post("/custom")
def custom_webhook(payload: Optional[Any] = Body(None)):
    logger.info("[webhooks] Custom event keys=%s", _keys(payload))
    return _ack("custom")
