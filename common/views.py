"""View helpers that render service outcomes as the result envelope."""

from typing import Any, Callable

from rest_framework.response import Response

from .results import run_action


def envelope_response(
    operation: str,
    func: Callable[[], Any],
    *,
    request=None,
    context: dict | None = None,
    success_message: str = "",
    success_status: int = 200,
) -> Response:
    """Run a service call and answer with ``{success, message, data?, error?}``."""
    ctx = dict(context or {})
    if request is not None and getattr(request, "user", None) is not None:
        ctx.setdefault("user_id", getattr(request.user, "id", None))
    result, status_code = run_action(
        operation,
        func,
        context=ctx,
        success_message=success_message,
        success_status=success_status,
    )
    return Response(result.as_dict(), status=status_code)
