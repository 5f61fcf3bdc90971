import json
from unittest import mock


def fake_response(status=200, payload=None, headers=None):
    """Stand-in for ``requests.Response`` with just what the client reads."""
    response = mock.Mock()
    response.status_code = status
    response.ok = status < 400
    response.headers = headers or {}
    response.content = json.dumps(payload).encode() if payload is not None else b""
    response.json.return_value = payload
    return response


def fake_session(*responses):
    session = mock.Mock()
    session.request.side_effect = list(responses)
    return session
