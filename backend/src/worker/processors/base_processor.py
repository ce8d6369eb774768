"""
Base processor class.
"""

from typing import Any

from src.shared.models.enums import BackgroundJob


class BaseProcessor:
    """Base class for background job processors."""

    async def process(self, job_type: BackgroundJob, payload: dict[str, Any]) -> None:
        """Process one job."""
        if job_type == BackgroundJob.MARK_SEEN:
            return await self.handle_mark_seen(payload)
        if job_type == BackgroundJob.INCREMENT_VERSION:
            return await self.handle_increment_version(payload)
        if job_type == BackgroundJob.RECOMPUTE_ENGAGEMENT:
            return await self.handle_recompute_engagement(payload)
        raise ValueError(f"Unknown job type: {job_type}")

    async def handle_mark_seen(self, payload: dict[str, Any]) -> None:
        """Handle a last-seen-version update."""
        raise NotImplementedError

    async def handle_increment_version(self, payload: dict[str, Any]) -> None:
        """Handle an anchor content change."""
        raise NotImplementedError

    async def handle_recompute_engagement(self, payload: dict[str, Any]) -> None:
        """Handle an engagement score recompute."""
        raise NotImplementedError
