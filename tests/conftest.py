"""
Pytest fixtures for Moono tests.

In-memory fakes stand in for the content store, progress store, auth and
audio collaborators in unit tests; integration tests use a file-backed SQLite
database through aiosqlite.
"""

import asyncio
import uuid
from typing import AsyncGenerator, Callable, Dict, List, Optional, Set

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from moono.config import Settings
from moono.database import build_engine, build_session_maker, init_db
from moono.engines.content.normalizer import normalize_payload
from moono.engines.content.repository import ContentRepository
from moono.engines.interaction.audio import AudioHandle, AudioTransport, PlaybackStatus
from moono.engines.progress.progress_store import ProgressStore
from moono.kernel.identity.identity_service import AuthProvider
from moono.kernel.models.base import Base
from moono.schemas.content import LessonSchema, LessonStepSchema, StepType, UnitSchema


# --- Fakes ---


class FakeAuth(AuthProvider):
    """Auth collaborator with a settable user."""

    def __init__(self, user_id: Optional[uuid.UUID] = None):
        self.user_id = user_id

    async def current_user(self) -> Optional[uuid.UUID]:
        return self.user_id

    async def ensure_session(self) -> uuid.UUID:
        if self.user_id is None:
            self.user_id = uuid.uuid4()
        return self.user_id


class FakeProgressStore(ProgressStore):
    """Completion facts in a dict; failures injectable per operation."""

    def __init__(self):
        self.completed: Dict[uuid.UUID, Set[int]] = {}
        self.upsert_calls: List[tuple] = []
        self.write_error: Optional[Exception] = None
        self.read_error: Optional[Exception] = None

    async def list_completed_lesson_ids(self, user_id: uuid.UUID) -> Set[int]:
        if self.read_error is not None:
            raise self.read_error
        return set(self.completed.get(user_id, set()))

    async def upsert_completion(self, user_id: uuid.UUID, lesson_id: int) -> None:
        self.upsert_calls.append((user_id, lesson_id))
        if self.write_error is not None:
            raise self.write_error
        self.completed.setdefault(user_id, set()).add(lesson_id)


class FakeContentRepository(ContentRepository):
    """
    Content held in memory.

    ``gates`` maps a lesson id to an asyncio.Event that list_steps waits on,
    to hold a load in flight.
    """

    def __init__(self):
        self.units: List[UnitSchema] = []
        self.lessons: Dict[int, List[LessonSchema]] = {}
        self.steps: Dict[int, List[LessonStepSchema]] = {}
        self.step_errors: Dict[int, Exception] = {}
        self.gates: Dict[int, asyncio.Event] = {}
        self.step_calls: List[int] = []

    async def list_units(self) -> List[UnitSchema]:
        return list(self.units)

    async def list_lessons(self, unit_id: int) -> List[LessonSchema]:
        return list(self.lessons.get(unit_id, []))

    async def list_steps(self, lesson_id: int) -> List[LessonStepSchema]:
        self.step_calls.append(lesson_id)
        gate = self.gates.get(lesson_id)
        if gate is not None:
            await gate.wait()
        error = self.step_errors.get(lesson_id)
        if error is not None:
            raise error
        return list(self.steps.get(lesson_id, []))


class FakeAudioHandle(AudioHandle):
    """
    Records transport calls; ``emit`` delivers a status update.

    Calls named in ``suspend_on`` yield to the event loop before returning.
    """

    def __init__(self, locator: str):
        self.locator = locator
        self.calls: List[str] = []
        self.callback = None
        self.released = False
        self.fail_on: Set[str] = set()
        self.suspend_on: Set[str] = set()

    async def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.suspend_on:
            await asyncio.sleep(0)
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")

    async def play(self) -> None:
        await self._record("play")

    async def pause(self) -> None:
        await self._record("pause")

    async def stop(self) -> None:
        await self._record("stop")

    async def release(self) -> None:
        await self._record("release")
        self.released = True

    def set_status_callback(self, callback) -> None:
        self.callback = callback

    def emit(self, **kwargs) -> None:
        if self.callback is not None:
            self.callback(PlaybackStatus(**kwargs))


class FakeAudioTransport(AudioTransport):
    """
    Hands out FakeAudioHandles; ``load_error`` makes loading fail.

    ``gate`` holds every load in flight, ``gates`` only the load of one locator.
    """

    def __init__(self):
        self.handles: List[FakeAudioHandle] = []
        self.load_error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.gates: Dict[str, asyncio.Event] = {}

    async def load(self, locator: str) -> AudioHandle:
        gate = self.gates.get(locator, self.gate)
        if gate is not None:
            await gate.wait()
        if self.load_error is not None:
            raise self.load_error
        handle = FakeAudioHandle(locator)
        self.handles.append(handle)
        return handle

    @property
    def live_handles(self) -> List[FakeAudioHandle]:
        return [h for h in self.handles if not h.released]


def build_step(
    step_id: int,
    step_type: str,
    content: Optional[str] = None,
    metadata: Optional[dict] = None,
    lesson_id: int = 1,
    title: Optional[str] = None,
) -> LessonStepSchema:
    """Build a normalized step the way the repository does."""
    kind = StepType(step_type)
    return LessonStepSchema(
        id=step_id,
        lesson_id=lesson_id,
        order_index=step_id,
        type=kind,
        title=title,
        content=content,
        payload=normalize_payload(kind, content, metadata or {}),
    )


# --- Fixtures ---


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite+aiosqlite:///:memory:")


@pytest.fixture
def step_factory() -> Callable[..., LessonStepSchema]:
    return build_step


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def auth(user_id: uuid.UUID) -> FakeAuth:
    return FakeAuth(user_id)


@pytest.fixture
def progress_store() -> FakeProgressStore:
    return FakeProgressStore()


@pytest.fixture
def content_repository() -> FakeContentRepository:
    return FakeContentRepository()


@pytest.fixture
def audio_transport() -> FakeAudioTransport:
    return FakeAudioTransport()


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """File-backed SQLite engine built like the application's (foreign keys enforced)."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'moono-test.db'}")
    await init_db(engine)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_maker = build_session_maker(db_engine)

    async with async_session_maker() as session:
        yield session
        await session.rollback()
