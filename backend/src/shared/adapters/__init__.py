"""
Adapters Package

External service integrations.

Contents:
=========
- sqs_adapter: AWS SQS notification queue client

Note: Database access is handled by shared/db/session.py using async SQLAlchemy.

Usage:
======
    from src.shared.adapters.sqs_adapter import SQSAdapter

    adapter = SQSAdapter()
    adapter.send_anchor_update_notification(anchor_id, title, author_id, version, recipients)
"""
