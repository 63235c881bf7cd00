"""Shared fixtures: a throwaway SQLite database per test and API clients."""

from datetime import datetime
from typing import List, Optional, Tuple

import pytest
from httpx import ASGITransport, AsyncClient

from ideation.database import build_engine, build_session_factory, create_tables, get_db, get_session_factory
from ideation.main import app
from ideation.models.idea import Idea
from ideation.models.invite import InvitedPlayer
from ideation.models.player import Player, PlayerDetails
from ideation.routers.auth import COOKIE_KEY, create_access_token, hash_password
from ideation.utils.timeutil import utcnow

PASSWORD = "secret123"


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ideation-test.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def api(session_factory):
    """Point the app's session dependencies at the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client_for(api):
    """Build clients, optionally signed in as a given player."""
    clients: List[AsyncClient] = []

    def _make(user_id: Optional[str] = None) -> AsyncClient:
        cookies = {COOKIE_KEY: create_access_token({"sub": user_id})} if user_id else None
        client = AsyncClient(transport=ASGITransport(app=api), base_url="http://test", cookies=cookies)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()


@pytest.fixture
async def client(client_for):
    return client_for()


@pytest.fixture
def mail_outbox(monkeypatch) -> List[Tuple[str, str, str]]:
    """Capture every email the app would send."""
    sent: List[Tuple[str, str, str]] = []

    async def record(recipient_email: str, subject: str, html_body: str) -> bool:
        sent.append((recipient_email, subject, html_body))
        return True

    monkeypatch.setattr("ideation.services.notifications.send_email", record)
    return sent


async def add_player(
    session_factory,
    email: str,
    display_name: str,
    is_admin: bool = False,
    verified: bool = True,
    receive_recap_emails: bool = True,
    invite_name: Optional[Tuple[str, str]] = None,
    created_at: Optional[datetime] = None,
) -> Player:
    async with session_factory() as db:
        player = Player(
            email=email,
            display_name=display_name,
            password_hash=hash_password(PASSWORD),
            email_verified=verified,
            receive_recap_emails=receive_recap_emails,
            created_at=created_at or utcnow(),
        )
        db.add(player)
        await db.flush()
        db.add(PlayerDetails(user_id=player.user_id, is_admin=is_admin))
        first, last = invite_name or (display_name, "")
        db.add(InvitedPlayer(email=email, first_name=first, last_name=last or None))
        await db.commit()
        return player


async def add_idea(
    session_factory,
    user_id: str,
    number: int,
    title: str = "Shared idea",
    tagged_users: Optional[List[str]] = None,
    created_at: Optional[datetime] = None,
    inspired_by: Optional[list] = None,
) -> Idea:
    async with session_factory() as db:
        idea = Idea(
            idea_number=number,
            idea_title=title,
            short_description=f"{title} description",
            reasoning="Because it saves money",
            cost_estimate="$0-$50K",
            feasibility_estimate="Manageable",
            user_id=user_id,
            tagged_users=tagged_users or [],
            inspired_by=inspired_by or [],
            created_at=created_at or utcnow(),
        )
        db.add(idea)
        await db.commit()
        return idea


@pytest.fixture
async def alice(session_factory):
    return await add_player(session_factory, "alice@corp.io", "Alice", invite_name=("Alice", "Archer"))


@pytest.fixture
async def bob(session_factory):
    return await add_player(session_factory, "bob@corp.io", "Bob", invite_name=("Bob", "Baker"))


@pytest.fixture
async def admin(session_factory):
    return await add_player(session_factory, "root@corp.io", "Root", is_admin=True)
