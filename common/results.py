"""Uniform result envelope returned by warehouse actions.

Every action endpoint answers with ``{success, message, data?, error?}``.
Business failures become ``success: false`` with the service's message;
unexpected failures are logged with context and reported generically.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .exceptions import WarehouseError

logger = logging.getLogger("warehouse.actions")

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


@dataclass
class ActionResult:
    success: bool
    message: str = ""
    data: Any = None
    error: str | None = None

    def as_dict(self) -> dict:
        payload: dict = {"success": self.success, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        if self.error is not None:
            payload["error"] = self.error
        return payload


def ok(data: Any = None, message: str = "") -> ActionResult:
    return ActionResult(success=True, message=message, data=data)


def fail(message: str, error: str | None = None, data: Any = None) -> ActionResult:
    return ActionResult(success=False, message=message, error=error, data=data)


def run_action(
    operation: str,
    func: Callable[[], Any],
    *,
    context: dict | None = None,
    success_message: str = "",
    success_status: int = 200,
) -> tuple[ActionResult, int]:
    """Run ``func`` and translate its outcome into ``(ActionResult, http_status)``."""
    try:
        data = func()
    except WarehouseError as exc:
        logger.info(
            "action.rejected",
            extra={"event": "action.rejected", "operation": operation, "reason": exc.message, **(context or {})},
        )
        return fail(exc.message, error=type(exc).__name__), exc.status_code
    except Exception:
        logger.exception(
            "action.failed",
            extra={"event": "action.failed", "operation": operation, **(context or {})},
        )
        return fail(GENERIC_ERROR_MESSAGE, error="internal_error"), 500
    return ok(data, success_message), success_status
