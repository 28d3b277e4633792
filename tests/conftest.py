"""Pytest fixtures: temp SQLite database, seeded documents, API client."""
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from studyshare.core.database import Base
from studyshare.core.dependencies import get_db, get_recorder
from studyshare.factory import create_app
from studyshare.models import Document, User
from studyshare.services.failed_search import FailedSearchRecorder

# Import models so Base.metadata has all tables
import studyshare.models  # noqa: F401


def make_doc(id: str, title: str, subject: str, **kwargs) -> Document:
    values = {
        "medium": "english",
        "type": "paper",
        "status": "approved",
        "file_path": f"documents/{id}.pdf",
        "downloads": 0,
        "upvotes": 0,
        "downvotes": 0,
        "views": 0,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    values.update(kwargs)
    return Document(id=id, title=title, subject=subject, **values)


def _month(m: int, day: int = 1) -> datetime:
    return datetime(2024, m, day, tzinfo=timezone.utc)


@pytest.fixture
def db_url(tmp_path) -> str:
    """SQLite URL for a temporary file, so concurrent sessions see each other."""
    return f"sqlite+aiosqlite:///{tmp_path / 'studyshare.db'}"


@pytest.fixture
async def engine(db_url):
    engine = create_async_engine(db_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded(session_factory):
    """A small library: maths, science, english, literature and one pending upload."""
    async with session_factory() as session:
        session.add(User(id="u1", name="Real Name", anon_name="Curious Owl", anon_avatar_seed="owl42"))
        await session.flush()
        session.add_all([
            make_doc("math-1", "Mathematics Past Papers 2019", "mathematics",
                     downloads=50, created_at=_month(1), uploader_id="u1"),
            make_doc("math-2", "Algebra short notes", "mathematics", medium="sinhala",
                     type="short_note", downloads=80, created_at=_month(2)),
            make_doc("sci-1", "Science model paper", "science", downloads=10, created_at=_month(3)),
            make_doc("eng-1", "English grammar notes", "english", type="short_note",
                     downloads=5, created_at=_month(4), uploader_id="u1"),
            make_doc("eng-2", "English past paper 2022", "english", downloads=30, created_at=_month(5)),
            make_doc("lit-en", "Poems for appreciation", "english_literary_texts", type="book",
                     downloads=20, created_at=_month(6)),
            make_doc("lit-si", "Sinhala literature guide", "sinhala_literary_texts", medium="sinhala",
                     type="book", downloads=15, created_at=_month(6, 15)),
            make_doc("lang-ta", "Tamil literature review", "tamil_language_literature", medium="tamil",
                     type="short_note", downloads=3, created_at=_month(7)),
            make_doc("hist-1", "History literature of Lanka", "history", downloads=40, created_at=_month(8)),
            make_doc("math-pending", "Mathematics leaked paper", "mathematics", status="pending",
                     downloads=999, created_at=_month(9)),
        ])
        await session.commit()


@pytest.fixture
def app(session_factory):
    """The app wired to the temp database. Tests may add their own overrides."""
    app = create_app()

    async def _db():
        async with session_factory() as session:
            yield session
            await session.commit()

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_recorder] = lambda: FailedSearchRecorder(session_factory)
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
