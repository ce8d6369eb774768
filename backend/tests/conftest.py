"""Shared fixtures: a throwaway SQLite database, a model factory and an API client."""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from src.api.dependencies.database import get_db
from src.api.main import create_application
from src.config.settings import settings
from src.shared.models import (
    Anchor,
    AnchorFollow,
    AnchorTag,
    Base,
    Item,
    ItemType,
    Like,
    User,
    UserBlock,
    UserFollow,
    Visibility,
)
from src.shared.utils.security import SecurityUtils
from src.worker.processors.side_effect_processor import SideEffectProcessor
from src.worker.task_runner import BackgroundTaskRunner


def minutes_ago(minutes: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=minutes)


def auth_headers(user_id: UUID) -> dict[str, str]:
    token = SecurityUtils.create_access_token(
        data={"user_id": str(user_id)},
        secret_key=settings.SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )
    return {"Authorization": f"Bearer {token}"}


class ModelFactory:
    """Creates committed rows so that background jobs (own sessions) can see them."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory
        self._counter = 0

    async def _save(self, *rows: Any) -> None:
        async with self.session_factory() as session:
            session.add_all(rows)
            await session.commit()

    async def user(self, username: Optional[str] = None, **kwargs: Any) -> User:
        self._counter += 1
        username = username or f"user{self._counter}"
        user = User(username=username, display_name=kwargs.pop("display_name", username.title()), **kwargs)
        await self._save(user)
        return user

    async def anchor(
        self,
        owner: User,
        *,
        title: str = "Anchor",
        visibility: Visibility = Visibility.PUBLIC,
        tags: tuple[str, ...] = (),
        **kwargs: Any,
    ) -> Anchor:
        anchor = Anchor(
            user_id=owner.id,
            title=title,
            visibility=visibility,
            tag_links=[AnchorTag(tag=tag) for tag in tags],
            **kwargs,
        )
        await self._save(anchor)
        return anchor

    async def item(self, anchor: Anchor, item_type: ItemType, position: int = 0, **kwargs: Any) -> Item:
        item = Item(anchor_id=anchor.id, type=item_type, position=position, **kwargs)
        await self._save(item)
        return item

    async def follow_user(self, follower: User, followed: User) -> None:
        await self._save(UserFollow(follower_id=follower.id, following_id=followed.id))

    async def block_user(self, blocker: User, blocked: User) -> None:
        await self._save(UserBlock(blocker_id=blocker.id, blocked_id=blocked.id))

    async def like(self, user: User, anchor: Anchor, created_at: Optional[datetime] = None) -> None:
        """Insert a like row. like_count is set by the caller when creating the anchor."""
        await self._save(Like(anchor_id=anchor.id, user_id=user.id, created_at=created_at or minutes_ago(0)))

    async def follow_anchor(
        self,
        user: User,
        anchor: Anchor,
        *,
        last_seen_version: int = 1,
        notify_on_update: bool = True,
        **kwargs: Any,
    ) -> AnchorFollow:
        follow = AnchorFollow(
            user_id=user.id,
            anchor_id=anchor.id,
            last_seen_version=last_seen_version,
            notify_on_update=notify_on_update,
            **kwargs,
        )
        await self._save(follow)
        return follow


# ═══════════════════════════════════════════════════════════════════════════════
# DATABASE
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
async def engine(tmp_path):
    """A fresh SQLite database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'anchor_feed.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def factory(session_factory):
    return ModelFactory(session_factory)


# ═══════════════════════════════════════════════════════════════════════════════
# BACKGROUND RUNNER
# ═══════════════════════════════════════════════════════════════════════════════


class RecordingRunner:
    """Stands in for BackgroundTaskRunner where only the submissions matter."""

    def __init__(self, accept: bool = True):
        self.accept = accept
        self.jobs: list[tuple[Any, dict[str, Any]]] = []

    def submit(self, job_type, **payload) -> bool:
        self.jobs.append((job_type, payload))
        return self.accept


@pytest.fixture
def recorder():
    return RecordingRunner()


@pytest.fixture
async def runner(session_factory):
    runner = BackgroundTaskRunner(
        SideEffectProcessor(session_factory),
        worker_count=2,
        queue_size=100,
        max_retries=1,
        retry_delay=0.01,
    )
    await runner.start()
    yield runner
    await runner.stop(timeout=5)


# ═══════════════════════════════════════════════════════════════════════════════
# API
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
async def client(session_factory, runner):
    """HTTP client against the app, wired to the test database and runner."""
    app = create_application()

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    # ASGITransport does not run the lifespan
    app.state.task_runner = runner

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
