"""Error taxonomy shared by warehouse services.

Services raise these; views translate them into the result envelope
(see ``common.results.run_action``).
"""


class WarehouseError(Exception):
    """Base class for expected business failures."""

    status_code = 400

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(WarehouseError):
    pass


class NotFound(WarehouseError):
    status_code = 404


class ConflictError(WarehouseError):
    status_code = 409


class InvalidTransition(WarehouseError):
    """A record is not in a status that allows the requested action."""

    def __init__(self, label: str, current: str, expected, action: str | None = None):
        expected = sorted(str(s) for s in expected)
        self.label = label
        self.current = str(current)
        self.expected = expected
        verb = f" for {action}" if action else ""
        message = f"{label} is not available{verb} (status: {self.current}, expected: {', '.join(expected)})"
        super().__init__(message)


class UnitBoundToBundle(ConflictError):
    """A unit is held by a bundle that is being assembled."""

    def __init__(self, label: str, bundle_id: int, action: str | None = None):
        self.label = label
        self.bundle_id = bundle_id
        verb = f" for {action}" if action else ""
        super().__init__(f"{label} is not available{verb} (bound to bundle {bundle_id})")
