"""
SQS adapter - AWS SQS notification queue.

Provides:
- Message sending to the notification queue
- The "anchor_updated" payload consumed by the notification service

Message Format:
===============
    {
        "event": "anchor_updated",
        "anchor_id": "7c9e...",
        "anchor_title": "Weekend hikes",
        "author_id": "a1b2...",
        "version": 6,
        "recipient_ids": ["c3d4...", "e5f6..."]
    }

boto3 is synchronous; async callers go through asyncio.to_thread().
"""

import json
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError

from src.config.settings import settings
from src.shared.core.logging import get_logger

logger = get_logger(__name__)

ANCHOR_UPDATED_EVENT = "anchor_updated"


class SQSAdapter:
    """
    Adapter for AWS SQS operations.

    Handles:
    - Sending notification fan-out requests
    - Skipping sends when no queue is configured (local development)
    """

    def __init__(
        self,
        queue_url: Optional[str] = None,
        region: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        client: Any = None,
    ):
        """
        Initialize SQS adapter.

        Args:
            queue_url: Notification queue URL (defaults to settings)
            region: AWS region
            aws_access_key_id: AWS access key
            aws_secret_access_key: AWS secret key
            client: Pre-built boto3 SQS client
        """
        self.queue_url = settings.SQS_NOTIFICATIONS_QUEUE_URL if queue_url is None else queue_url
        self.region = region or settings.AWS_REGION
        self.aws_access_key_id = aws_access_key_id or settings.AWS_ACCESS_KEY_ID
        self.aws_secret_access_key = aws_secret_access_key or settings.AWS_SECRET_ACCESS_KEY
        self._client = client

    @property
    def client(self):
        """Lazy-loaded SQS client."""
        if self._client is None:
            if self.aws_access_key_id and self.aws_secret_access_key:
                self._client = boto3.client(
                    "sqs",
                    region_name=self.region,
                    aws_access_key_id=self.aws_access_key_id,
                    aws_secret_access_key=self.aws_secret_access_key,
                )
            else:
                # Default credential chain (IAM role, environment, etc.)
                self._client = boto3.client("sqs", region_name=self.region)
        return self._client

    @property
    def enabled(self) -> bool:
        return bool(self.queue_url)

    def send_message(self, message_body: Dict[str, Any]) -> Optional[str]:
        """
        Send a message to the notification queue.

        Args:
            message_body: Message payload (will be JSON serialized)

        Returns:
            Message ID, or None when no queue is configured
        """
        if not self.enabled:
            logger.debug("Notification queue not configured, message skipped", event_type=message_body.get("event"))
            return None

        try:
            response = self.client.send_message(
                QueueUrl=self.queue_url,
                MessageBody=json.dumps(message_body),
            )
        except ClientError as e:
            logger.error("Failed to send notification message", queue_url=self.queue_url, error=str(e))
            raise

        message_id = response["MessageId"]
        logger.info("Notification message sent", message_id=message_id, event_type=message_body.get("event"))
        return message_id

    def send_anchor_update_notification(
        self,
        anchor_id: str,
        anchor_title: str,
        author_id: str,
        version: int,
        recipient_ids: List[str],
    ) -> Optional[str]:
        """
        Ask the notification service to tell followers an anchor changed.

        Args:
            anchor_id: Changed anchor
            anchor_title: Title shown in the notification
            author_id: Anchor owner
            version: Version after the change
            recipient_ids: Followers with notify_on_update, actor excluded

        Returns:
            Message ID, or None when nothing was sent
        """
        if not recipient_ids:
            return None

        return self.send_message(
            {
                "event": ANCHOR_UPDATED_EVENT,
                "anchor_id": anchor_id,
                "anchor_title": anchor_title,
                "author_id": author_id,
                "version": version,
                "recipient_ids": recipient_ids,
            }
        )
