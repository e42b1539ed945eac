"""Tests des routes HTTP /api/send-checklist et /api/subscribers/status."""

import pytest
from httpx import AsyncClient
from sqlalchemy.orm import Session

from voyageur import database
from voyageur.database import get_db
from voyageur.main import app
from voyageur.models.subscriber import Subscriber
from voyageur.routers.checklist import get_subscriber_store
from voyageur.services.checklist_service import ALREADY_SENT_MESSAGE, SUCCESS_MESSAGE
from voyageur.services.validation import MAX_NAME_LENGTH

from .conftest import VALID_PAYLOAD, FakeSender, FakeSubscriberStore

URL = "/api/send-checklist"


@pytest.mark.asyncio
class TestSendChecklistRoute:
    async def test_first_submission(self, client: AsyncClient, db_session: Session, fake_sender: FakeSender) -> None:
        response = await client.post(URL, json=VALID_PAYLOAD)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == SUCCESS_MESSAGE
        assert data["subscriber_id"]
        assert response.headers["access-control-allow-origin"] == "*"

        row = db_session.query(Subscriber).filter(Subscriber.email == "awa@example.com").one()
        assert row.id == data["subscriber_id"]
        assert row.checklist_sent is True
        assert fake_sender.calls == [("awa@example.com", "Awa")]

    async def test_resubmission(self, client: AsyncClient, db_session: Session, fake_sender: FakeSender) -> None:
        await client.post(URL, json=VALID_PAYLOAD)
        response = await client.post(URL, json=VALID_PAYLOAD)

        assert response.status_code == 200
        assert response.json()["message"] == ALREADY_SENT_MESSAGE
        assert db_session.query(Subscriber).count() == 1
        assert len(fake_sender.calls) == 1

    async def test_invalid_email(self, client: AsyncClient, db_session: Session) -> None:
        response = await client.post(URL, json={**VALID_PAYLOAD, "email": "not-an-email"})

        assert response.status_code == 400
        assert "email" in response.json()["error"]
        assert db_session.query(Subscriber).count() == 0

    @pytest.mark.parametrize("field", ["firstName", "lastName", "email"])
    async def test_missing_field(self, field: str, client: AsyncClient, db_session: Session) -> None:
        payload = {k: v for k, v in VALID_PAYLOAD.items() if k != field}
        response = await client.post(URL, json=payload)

        assert response.status_code == 400
        assert "error" in response.json()
        assert db_session.query(Subscriber).count() == 0

    async def test_consent_refused(self, client: AsyncClient, db_session: Session) -> None:
        response = await client.post(URL, json={**VALID_PAYLOAD, "gdprConsent": False})

        assert response.status_code == 400
        assert db_session.query(Subscriber).count() == 0

    async def test_malformed_json(self, client: AsyncClient) -> None:
        response = await client.post(URL, content=b"{pas du json", headers={"content-type": "application/json"})

        assert response.status_code == 400
        assert response.json() == {"error": "Format de données invalide"}

    async def test_json_array_is_rejected(self, client: AsyncClient) -> None:
        response = await client.post(URL, json=[VALID_PAYLOAD])
        assert response.status_code == 400

    async def test_send_failure_returns_500(self, client: AsyncClient, db_session: Session, fake_sender: FakeSender) -> None:
        fake_sender.result = False
        response = await client.post(URL, json=VALID_PAYLOAD)

        assert response.status_code == 500
        assert response.json()["error"] == "Erreur lors de l'envoi de l'email"
        row = db_session.query(Subscriber).one()
        assert row.checklist_sent is False

    async def test_preflight(self, client: AsyncClient) -> None:
        response = await client.options(URL)

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
        assert "apikey" in response.headers["access-control-allow-headers"]

    async def test_browser_preflight(self, client: AsyncClient) -> None:
        response = await client.options(
            URL,
            headers={
                "Origin": "https://offre.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type, apikey",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_missing_database_configuration(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(database, "SessionLocal", None)
    app.dependency_overrides.pop(get_db, None)

    response = await client.post(URL, json=VALID_PAYLOAD)

    assert response.status_code == 500
    assert response.json() == {"error": "Configuration serveur incorrecte"}


@pytest.mark.asyncio
class TestSubscriberStatusRoute:
    async def test_unknown_email(self, client: AsyncClient) -> None:
        response = await client.get("/api/subscribers/status", params={"email": "nobody@example.com"})

        assert response.status_code == 200
        assert response.json() == {"id": None, "exists": False, "checklist_sent": False}

    async def test_known_email(self, client: AsyncClient) -> None:
        created = (await client.post(URL, json=VALID_PAYLOAD)).json()
        response = await client.get("/api/subscribers/status", params={"email": "AWA@example.com"})

        assert response.json() == {"id": created["subscriber_id"], "exists": True, "checklist_sent": True}

    async def test_invalid_email(self, client: AsyncClient) -> None:
        response = await client.get("/api/subscribers/status", params={"email": "nope"})
        assert response.status_code == 400


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["email"]["configured"] is False


@pytest.mark.asyncio
class TestRouteErrorMapping:
    async def test_upsert_failure_returns_generic_500(self, client: AsyncClient) -> None:
        store = FakeSubscriberStore()
        store.fail_upsert = True
        app.dependency_overrides[get_subscriber_store] = lambda: store

        response = await client.post(URL, json=VALID_PAYLOAD)

        assert response.status_code == 500
        assert response.json() == {"error": "Erreur lors de l'enregistrement"}

    async def test_name_over_column_limit_returns_400(self, client: AsyncClient, db_session: Session) -> None:
        response = await client.post(URL, json={**VALID_PAYLOAD, "lastName": "x" * (MAX_NAME_LENGTH + 1)})

        assert response.status_code == 400
        assert str(MAX_NAME_LENGTH) in response.json()["error"]
        assert db_session.query(Subscriber).count() == 0

    async def test_name_at_column_limit_is_stored(self, client: AsyncClient, db_session: Session) -> None:
        response = await client.post(URL, json={**VALID_PAYLOAD, "lastName": "x" * MAX_NAME_LENGTH})

        assert response.status_code == 200
        assert db_session.query(Subscriber).one().last_name == "x" * MAX_NAME_LENGTH


@pytest.mark.asyncio
async def test_browser_preflight_for_status_lookup(client: AsyncClient) -> None:
    response = await client.options(
        "/api/subscribers/status",
        headers={
            "Origin": "https://offre.example.com",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "apikey",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "GET" in response.headers["access-control-allow-methods"]
