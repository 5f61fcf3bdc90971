from common.exceptions import ConflictError, InvalidTransition, NotFound
from common.results import GENERIC_ERROR_MESSAGE, run_action


def test_success_carries_data_and_status():
    result, status = run_action("demo", lambda: {"id": 1}, success_message="Done", success_status=201)
    assert status == 201
    assert result.as_dict() == {"success": True, "message": "Done", "data": {"id": 1}}


def test_business_errors_keep_their_message_and_status():
    def missing():
        raise NotFound("Shipment not found")

    result, status = run_action("demo", missing)
    assert status == 404
    assert result.as_dict() == {"success": False, "message": "Shipment not found", "error": "NotFound"}

    def taken():
        raise ConflictError("Storage is full", status_code=422)

    result, status = run_action("demo", taken)
    assert status == 422
    assert result.error == "ConflictError"


def test_unexpected_errors_are_reported_generically(caplog):
    def boom():
        raise RuntimeError("db password is hunter2")

    result, status = run_action("demo", boom, context={"user_id": 5})
    assert status == 500
    assert result.message == GENERIC_ERROR_MESSAGE
    assert result.error == "internal_error"
    assert "hunter2" not in result.message
    assert "action.failed" in caplog.text


def test_invalid_transition_message_lists_expected_statuses():
    exc = InvalidTransition("Unit ABCD1234", "sold", {"received", "allocated"}, action="assembly")
    assert exc.message == "Unit ABCD1234 is not available for assembly (status: sold, expected: allocated, received)"
    assert exc.status_code == 400
