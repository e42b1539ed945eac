"""Configuration pytest et fixtures communes.

- Base SQLite en mémoire (StaticPool) injectée à la place de get_db
- Store et expéditeur d'emails en mémoire pour les tests du handler
- Client httpx branché sur l'application ASGI
"""

import os

# Avant tout import de voyageur : la configuration est lue à l'import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RESEND_API_KEY"] = ""
os.environ["CHECKLIST_API_URL"] = ""

from collections.abc import AsyncGenerator, Generator
from typing import Optional
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from voyageur.config import clear_settings_cache
from voyageur.database import Base, get_db
from voyageur.errors import StoreError
from voyageur.main import app
from voyageur.models.subscriber import Subscriber
from voyageur.routers.checklist import get_notification_sender
from voyageur.schemas.subscriber_schema import SubscriberInput


VALID_PAYLOAD = {
    "firstName": "Awa",
    "lastName": "K.",
    "email": "awa@example.com",
    "gdprConsent": True,
}


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


class FakeSubscriberStore:
    """Store en mémoire, indexé par email."""

    def __init__(self) -> None:
        self.rows: dict[str, Subscriber] = {}
        self.upserts = 0
        self.fail_find = False
        self.fail_upsert = False
        self.fail_mark = False

    def find_by_email(self, email: str) -> Optional[Subscriber]:
        if self.fail_find:
            raise StoreError("Erreur lors de la vérification de l'email")
        return self.rows.get(email)

    def upsert(self, subscriber: SubscriberInput) -> Subscriber:
        if self.fail_upsert:
            raise StoreError("Erreur lors de l'enregistrement", details="connexion perdue")
        self.upserts += 1
        row = self.rows.get(subscriber.email)
        if row is None:
            row = Subscriber(id=str(uuid4()), email=subscriber.email, checklist_sent=False)
            self.rows[subscriber.email] = row
        row.first_name = subscriber.first_name
        row.last_name = subscriber.last_name
        row.gdpr_consent = subscriber.gdpr_consent
        return row

    def mark_sent(self, subscriber_id: str) -> None:
        if self.fail_mark:
            raise StoreError("Erreur lors de la mise à jour")
        for row in self.rows.values():
            if row.id == subscriber_id:
                row.checklist_sent = True


class FakeSender:
    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.calls: list[tuple[str, str]] = []

    async def send(self, to_email: str, first_name: str) -> bool:
        self.calls.append((to_email, first_name))
        return self.result


@pytest.fixture
def fake_store() -> FakeSubscriberStore:
    return FakeSubscriberStore()


@pytest.fixture
def fake_sender() -> FakeSender:
    return FakeSender()


@pytest_asyncio.fixture
async def client(db_session: Session, fake_sender: FakeSender) -> AsyncGenerator[AsyncClient, None]:
    """Client HTTP sur l'app avec la base en mémoire et l'expéditeur factice."""

    def _override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_notification_sender] = lambda: fake_sender
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
