"""
Accès à la table subscribers.

Le handler ne dépend que du protocole SubscriberStore, ce qui permet aux tests
de brancher une implémentation en mémoire.
"""
import logging
from datetime import datetime
from typing import Optional, Protocol

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import StoreError
from ..models.subscriber import Subscriber, new_subscriber_id
from ..schemas.subscriber_schema import SubscriberInput
from .validation import normalize_email

logger = logging.getLogger(__name__)

# Dialectes qui savent faire INSERT ... ON CONFLICT (email) DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class SubscriberStore(Protocol):
    def find_by_email(self, email: str) -> Optional[Subscriber]:
        ...

    def upsert(self, subscriber: SubscriberInput) -> Subscriber:
        ...

    def mark_sent(self, subscriber_id: str) -> None:
        ...


class SqlAlchemySubscriberStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[Subscriber]:
        """Retourne l'abonné ou None ; l'absence n'est pas une erreur."""
        try:
            return self.db.query(Subscriber).filter(
                Subscriber.email == normalize_email(email)
            ).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Erreur lors de la vérification de l'email", details=str(e)) from e

    def upsert(self, subscriber: SubscriberInput) -> Subscriber:
        """
        Crée l'abonné ou rafraîchit nom/prénom/consentement de la ligne existante.
        checklist_sent n'est jamais touché par la branche de conflit.
        """
        now = datetime.utcnow()
        values = {
            "id": new_subscriber_id(),
            "first_name": subscriber.first_name,
            "last_name": subscriber.last_name,
            "email": normalize_email(subscriber.email),
            "gdpr_consent": subscriber.gdpr_consent,
            "checklist_sent": False,
            "created_at": now,
            "updated_at": now,
        }
        try:
            insert = _UPSERT_INSERTS.get(self.db.get_bind().dialect.name)
            if insert is not None:
                stmt = insert(Subscriber).values(**values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=["email"],
                    set_={
                        "first_name": stmt.excluded.first_name,
                        "last_name": stmt.excluded.last_name,
                        "gdpr_consent": stmt.excluded.gdpr_consent,
                        "updated_at": stmt.excluded.updated_at,
                    },
                )
                self.db.execute(stmt)
            else:
                self._upsert_without_on_conflict(values)
            self.db.commit()
            return self.db.query(Subscriber).filter(Subscriber.email == values["email"]).one()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Erreur base de données lors de l'upsert de {values['email']}: {e}", exc_info=True)
            raise StoreError("Erreur lors de l'enregistrement", details=str(e)) from e

    def _upsert_without_on_conflict(self, values: dict) -> None:
        existing = self.db.query(Subscriber).filter(Subscriber.email == values["email"]).first()
        if existing:
            existing.first_name = values["first_name"]
            existing.last_name = values["last_name"]
            existing.gdpr_consent = values["gdpr_consent"]
            existing.updated_at = values["updated_at"]
        else:
            self.db.add(Subscriber(**values))
        self.db.flush()

    def mark_sent(self, subscriber_id: str) -> None:
        try:
            updated = self.db.query(Subscriber).filter(Subscriber.id == subscriber_id).update(
                {"checklist_sent": True, "updated_at": datetime.utcnow()},
                synchronize_session=False,
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Erreur lors de la mise à jour", details=str(e)) from e
        if not updated:
            raise StoreError(f"Abonné {subscriber_id} introuvable")
