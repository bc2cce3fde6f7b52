"""Tests for webhook delivery tasks."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from logiflow.workers.notification_tasks import deliver_webhook


def test_delivers_payload():
    response = MagicMock(status_code=202)

    with patch("logiflow.workers.notification_tasks.httpx.post", return_value=response) as post:
        result = deliver_webhook("https://hooks.example.com/erp", {"event": "approval:approved"})

    assert result == {"status": "sent", "status_code": 202, "event": "approval:approved"}
    assert post.call_args.args == ("https://hooks.example.com/erp",)
    assert post.call_args.kwargs["json"] == {"event": "approval:approved"}
    response.raise_for_status.assert_called_once()


def test_transport_error_is_raised_for_retry():
    with patch(
        "logiflow.workers.notification_tasks.httpx.post",
        side_effect=httpx.ConnectError("connection refused"),
    ):
        with pytest.raises(httpx.ConnectError):
            deliver_webhook("https://hooks.example.com/erp", {"event": "approval:rejected"})
