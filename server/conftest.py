"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("ENVIRONMENT", "test")

import re
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from galant.core.security import create_access_token
from galant.db.base import Base
from galant.db.session import get_db
from galant.dependencies import get_session_registry
from galant.main import app
from galant.models.piece import Piece
from galant.models.schema import Schema, SchemaEvent
from galant.models.user import User
from galant.overlay.session import SessionRegistry


# Test database URL (use in-memory SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SCORE_DATA = "<mei>two pages</mei>"
INVALID_SCORE_DATA = "not a score"
UNLAYABLE_SCORE_DATA = "<mei>no systems</mei>"

# Verovio wraps page content in a nested, viewBox-scaled svg.
PAGE_TEMPLATE = """<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" width="1000px" height="500px">
<svg class="definition-scale" viewBox="0 0 20000 10000">
<g class="page-margin" transform="translate(500, 500)">
{content}
</g>
</svg>
</svg>"""

PAGE_ONE = PAGE_TEMPLATE.format(
    content="""<g id="m1" class="measure">
<g id="n1" class="note"><rect x="100" y="100" width="20" height="20"/></g>
<g id="n2" class="note"><rect x="300" y="100" width="20" height="20"/></g>
</g>
<g id="m2" class="measure">
<g id="n3" class="note"><rect x="500" y="200" width="20" height="20"/></g>
</g>"""
)

PAGE_TWO = PAGE_TEMPLATE.format(
    content="""<g id="m3" class="measure">
<g id="n4" class="note"><rect x="100" y="100" width="20" height="20"/></g>
</g>
<g id="orphan" class="note"><rect x="900" y="100" width="20" height="20"/></g>"""
)


class FakeEngine:
    """Stands in for a Verovio toolkit: two fixed pages of notes in measures m1-m3."""

    def __init__(self, pages: list[str] | None = None) -> None:
        self.pages = pages or [PAGE_ONE, PAGE_TWO]
        self.options = None
        self.data = None
        self.loaded = False
        self.render_calls = 0

    def setOptions(self, options):
        self.options = options

    def loadData(self, data: str) -> bool:
        self.data = data
        self.loaded = data != INVALID_SCORE_DATA
        return self.loaded

    def getLog(self) -> str:
        return "" if self.loaded else "Error: unable to parse input"

    def getPageCount(self) -> int:
        if self.data == UNLAYABLE_SCORE_DATA:
            raise RuntimeError("layout failed")
        return len(self.pages) if self.loaded else 0

    def renderToSVG(self, page_no: int) -> str:
        self.render_calls += 1
        return self.pages[page_no - 1]

    def getPageWithElement(self, xml_id: str) -> int:
        for number, page in enumerate(self.pages, start=1):
            if f'id="{xml_id}"' in page:
                return number
        return 0

    def getElementAttr(self, xml_id: str) -> dict:
        match = re.fullmatch(r"m(\d+)", xml_id)
        if match and self.getPageWithElement(xml_id):
            return {"xml:id": xml_id, "n": match.group(1)}
        return {}


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry(FakeEngine, max_sessions=4)


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(email="test@example.com", name="Test User", is_active=True)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user: User) -> dict[str, str]:
    token = create_access_token(data={"email": test_user.email, "name": test_user.name})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers() -> dict[str, str]:
    token = create_access_token(data={"email": "other@example.com", "name": "Other User"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def test_piece(db_session: AsyncSession, test_user: User) -> Piece:
    piece = Piece(
        title="Sonata in C",
        composer="Galuppi",
        score_format="mei",
        score_data=SCORE_DATA,
        contributor_id=test_user.id,
    )
    db_session.add(piece)
    await db_session.commit()
    await db_session.refresh(piece)
    return piece


@pytest.fixture
async def test_schema(db_session: AsyncSession, test_user: User) -> Schema:
    """A three-event schema with a melody event at 0 and a bass event at 1."""
    schema = Schema(
        name="Prinner",
        citation="Gjerdingen 2007",
        schema_type="cadential",
        event_count=3,
        active=True,
        contributor_id=test_user.id,
        events=[
            SchemaEvent(index=0, category="melody", value="5"),
            SchemaEvent(index=1, category="bass", value="3"),
        ],
    )
    db_session.add(schema)
    await db_session.commit()
    return schema


@pytest.fixture
async def client(db_session: AsyncSession, registry: SessionRegistry) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database and render engine overrides."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_registry] = lambda: registry

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
