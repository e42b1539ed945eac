"""
Orchestration d'une demande d'offre :
validation → vérification du doublon → upsert → envoi de l'email → marquage.

Passe unique, sans nouvelle tentative. Toute étape peut court-circuiter vers
une réponse d'erreur (ChecklistError).
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..errors import BadRequestError, NotificationError, StoreError
from .email_service import NotificationSender
from .subscriber_store import SubscriberStore
from .validation import validate_subscriber

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Offre envoyée avec succès ! Vérifiez votre boîte email (et vos spams)."
ALREADY_SENT_MESSAGE = "Vous avez déjà reçu l'offre à cette adresse email."


@dataclass
class SubmissionResult:
    message: str
    subscriber_id: Optional[str] = None
    already_sent: bool = False

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.subscriber_id:
            body["subscriber_id"] = self.subscriber_id
        return body


async def submit_checklist_request(
    payload: Any,
    store: SubscriberStore,
    sender: NotificationSender,
) -> SubmissionResult:
    if not isinstance(payload, dict):
        raise BadRequestError("Format de données invalide")

    subscriber = validate_subscriber(payload)

    # Une erreur de lecture n'empêche pas l'inscription
    try:
        existing = store.find_by_email(subscriber.email)
    except StoreError as e:
        logger.error(f"Erreur lors de la vérification de {subscriber.email}: {e.details or e}")
        existing = None

    # Déjà envoyé : aucune écriture, aucun nouvel envoi
    if existing is not None and existing.checklist_sent:
        logger.info(f"Offre déjà envoyée à {subscriber.email}, rien à faire")
        return SubmissionResult(
            message=ALREADY_SENT_MESSAGE,
            subscriber_id=existing.id,
            already_sent=True,
        )

    stored = store.upsert(subscriber)

    sent = await sender.send(stored.email, stored.first_name)
    if not sent:
        logger.error(f"Échec de l'envoi d'email à {stored.email}")
        raise NotificationError("Erreur lors de l'envoi de l'email")

    try:
        store.mark_sent(stored.id)
    except StoreError as e:
        # L'email est parti : la réponse reste un succès
        logger.error(f"Erreur de mise à jour de checklist_sent pour {stored.id}: {e.details or e}")

    logger.info(f"✅ Offre envoyée à {stored.email} (abonné {stored.id})")
    return SubmissionResult(message=SUCCESS_MESSAGE, subscriber_id=stored.id)
