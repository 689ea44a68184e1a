"""Database seeding script for development."""

import asyncio
import sys
from pathlib import Path

# Add server directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "server"))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from galant.config import settings
from galant.db.base import Base
from galant.db.session import build_engine, build_sessionmaker
from galant.models.music_source import MusicSource
from galant.models.schema import Schema
from galant.models.user import User
from galant.services.schema_service import SchemaService

GJERDINGEN = "Gjerdingen, Music in the Galant Style (2007)"

# name, type, event count, (index, category, value) events
SCHEMATA = [
    (
        "Prinner",
        "riposte",
        4,
        [
            (0, "melody", "6"), (1, "melody", "5"), (2, "melody", "4"), (3, "melody", "3"),
            (0, "bass", "4"), (1, "bass", "3"), (2, "bass", "2"), (3, "bass", "1"),
        ],
    ),
    (
        "Do-Re-Mi",
        "opening",
        3,
        [
            (0, "melody", "1"), (1, "melody", "2"), (2, "melody", "3"),
            (0, "bass", "1"), (1, "bass", "7"), (2, "bass", "1"),
        ],
    ),
    (
        "Romanesca",
        "opening",
        4,
        [
            (0, "bass", "1"), (1, "bass", "7"), (2, "bass", "6"), (3, "bass", "3"),
            (0, "figures", "5/3"), (1, "figures", "6/3"), (2, "figures", "5/3"), (3, "figures", "6/3"),
        ],
    ),
    (
        "Fonte",
        "sequential",
        4,
        [
            (0, "melody", "4"), (1, "melody", "3"), (2, "melody", "4"), (3, "melody", "3"),
            (0, "bass", "7"), (1, "bass", "1"), (2, "bass", "7"), (3, "bass", "1"),
            (0, "roman", "V6/5/ii"), (1, "roman", "ii"), (2, "roman", "V6/5"), (3, "roman", "I"),
        ],
    ),
]

MUSIC_SOURCES = [
    {
        "name": "Mozart Piano Sonatas",
        "description": "Humdrum encodings of the Mozart piano sonatas",
        "base_url": "https://raw.githubusercontent.com/craigsapp/mozart-piano-sonatas/master/kern/",
        "composer": "Mozart",
        "score_format": "humdrum",
    },
]


async def seed_database(session: AsyncSession) -> dict[str, int]:
    """Create the development contributor, classic schemata and sources; skips what exists."""
    created = {"users": 0, "schemata": 0, "music_sources": 0}

    result = await session.execute(select(User).where(User.email == "dev@galant.test"))
    user = result.scalar_one_or_none()
    if not user:
        user = User(email="dev@galant.test", name="Galant Developer", is_active=True)
        session.add(user)
        await session.commit()
        created["users"] += 1

    service = SchemaService(session)
    for name, schema_type, event_count, events in SCHEMATA:
        result = await session.execute(select(Schema.id).where(Schema.name == name))
        if result.scalar_one_or_none() is not None:
            continue
        await service.create_schema(
            contributor_id=user.id,
            name=name,
            schema_type=schema_type,
            event_count=event_count,
            citation=GJERDINGEN,
            active=True,
            events=events,
        )
        created["schemata"] += 1

    for source in MUSIC_SOURCES:
        result = await session.execute(select(MusicSource.id).where(MusicSource.name == source["name"]))
        if result.scalar_one_or_none() is not None:
            continue
        session.add(MusicSource(**source))
        await session.commit()
        created["music_sources"] += 1

    return created


async def main():
    """Seed the database with development data."""
    engine = build_engine(settings.DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = build_sessionmaker(engine)
    async with async_session() as session:
        created = await seed_database(session)

    await engine.dispose()
    print(f"Seeded {created['users']} users, {created['schemata']} schemata, "
          f"{created['music_sources']} music sources")


if __name__ == "__main__":
    asyncio.run(main())
