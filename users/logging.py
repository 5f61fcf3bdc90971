import logging

logger = logging.getLogger("auth")


def log_auth_event(action: str, request, user=None, status: str = "success", extra: dict | None = None):
    """Log ``auth.<action>`` with the caller's ip, the outcome and, when known, the staff member."""
    event = f"auth.{action}"
    context = {"event": event, "ip": request.META.get("REMOTE_ADDR"), "status": status}
    if user is not None:
        context["user_id"] = getattr(user, "id", None)
        context["organization_id"] = getattr(user, "organization_id", None)
    if extra:
        context.update(extra)
    level = logging.INFO if status == "success" else logging.WARNING
    logger.log(level, event, extra=context)
