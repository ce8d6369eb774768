"""Tests for the notification queue adapter."""

import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from src.shared.adapters.sqs_adapter import ANCHOR_UPDATED_EVENT, SQSAdapter

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/anchor-notifications"


@pytest.fixture
def sqs_client():
    client = MagicMock()
    client.send_message.return_value = {"MessageId": "abc-123"}
    return client


class TestSQSAdapter:
    def test_sends_anchor_update_event(self, sqs_client):
        adapter = SQSAdapter(queue_url=QUEUE_URL, client=sqs_client)

        message_id = adapter.send_anchor_update_notification(
            anchor_id="a1",
            anchor_title="Trip plan",
            author_id="u1",
            version=5,
            recipient_ids=["u2", "u3"],
        )

        assert message_id == "abc-123"
        kwargs = sqs_client.send_message.call_args.kwargs
        assert kwargs["QueueUrl"] == QUEUE_URL
        assert json.loads(kwargs["MessageBody"]) == {
            "event": ANCHOR_UPDATED_EVENT,
            "anchor_id": "a1",
            "anchor_title": "Trip plan",
            "author_id": "u1",
            "version": 5,
            "recipient_ids": ["u2", "u3"],
        }

    def test_no_recipients_sends_nothing(self, sqs_client):
        adapter = SQSAdapter(queue_url=QUEUE_URL, client=sqs_client)

        assert adapter.send_anchor_update_notification("a1", "t", "u1", 2, []) is None
        sqs_client.send_message.assert_not_called()

    def test_unconfigured_queue_is_skipped(self, sqs_client):
        adapter = SQSAdapter(queue_url="", client=sqs_client)

        assert adapter.enabled is False
        assert adapter.send_message({"event": "x"}) is None
        sqs_client.send_message.assert_not_called()

    def test_client_errors_propagate(self, sqs_client):
        sqs_client.send_message.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "SendMessage"
        )
        adapter = SQSAdapter(queue_url=QUEUE_URL, client=sqs_client)

        with pytest.raises(ClientError):
            adapter.send_message({"event": "x"})
