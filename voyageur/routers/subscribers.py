import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..errors import StoreError
from ..schemas.subscriber_schema import SubscriberStatusOut
from ..services.subscriber_store import SubscriberStore
from ..services.validation import INVALID_EMAIL_MESSAGE, is_valid_email, normalize_email
from .checklist import CORS_HEADERS, get_subscriber_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscribers", tags=["subscribers"])


@router.get("/status", response_model=SubscriberStatusOut)
def get_subscriber_status(email: str = "", store: SubscriberStore = Depends(get_subscriber_store)):
    """
    Indique si une adresse est déjà inscrite et si l'offre lui a été envoyée.
    """
    email = normalize_email(email)
    if not is_valid_email(email):
        return JSONResponse(status_code=400, content={"error": INVALID_EMAIL_MESSAGE}, headers=CORS_HEADERS)

    try:
        subscriber = store.find_by_email(email)
    except StoreError as e:
        logger.error(f"Erreur vérification email {email}: {e.details or e}")
        return JSONResponse(status_code=500, content=e.to_dict(), headers=CORS_HEADERS)

    if subscriber is None:
        return SubscriberStatusOut(exists=False, checklist_sent=False)
    return SubscriberStatusOut(id=subscriber.id, exists=True, checklist_sent=bool(subscriber.checklist_sent))
