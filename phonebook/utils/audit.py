"""Audit logging utilities."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from functools import wraps
from typing import Any, Callable, Dict

logger = logging.getLogger("phonebook.audit")


class AuditLogger:
    """Structured audit logger."""

    def record(self, action: str, actor: str, details: Dict[str, Any]) -> None:
        payload = {
            "timestamp": datetime.utcnow().isoformat(),
            "action": action,
            "actor": actor,
            "details": details,
        }
        logger.info(json.dumps(payload, default=str))


audit_logger = AuditLogger()


def audit_log(func: Callable) -> Callable:
    """Decorator that emits structured audit records around a coroutine."""

    @wraps(func)
    async def wrapper(*args, **kwargs):
        actor = _resolve_actor(args, kwargs)
        metadata = _build_metadata(func, kwargs)
        audit_logger.record("start", actor, metadata)
        try:
            result = await func(*args, **kwargs)
        except Exception as exc:
            audit_logger.record("error", actor, metadata | {"error": str(exc)})
            raise
        audit_logger.record("success", actor, metadata)
        return result

    return wrapper


def _resolve_actor(args: tuple, kwargs: Dict[str, Any]) -> str:
    identity = kwargs.get("identity")
    if identity is None:
        identity = next((arg for arg in args if hasattr(arg, "id") and hasattr(arg, "username")), None)
    if identity is not None and getattr(identity, "id", None):
        return str(identity.id)
    return "anonymous"


def _build_metadata(func: Callable, kwargs: Dict[str, Any]) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {"action": func.__qualname__}
    if "person_id" in kwargs:
        metadata["person_id"] = kwargs["person_id"]
    return metadata


__all__ = ["audit_logger", "audit_log", "AuditLogger"]
