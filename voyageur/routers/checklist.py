"""
Route d'inscription à l'offre du Voyageur Malin (formulaire de la landing page).
"""
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import BadRequestError, ChecklistError
from ..schemas.subscriber_schema import ErrorResponse, SubmissionResponse
from ..services.checklist_service import submit_checklist_request
from ..services.email_service import ChecklistEmailSender, NotificationSender
from ..services.subscriber_store import SqlAlchemySubscriberStore, SubscriberStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/send-checklist", tags=["checklist"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def get_subscriber_store(db: Session = Depends(get_db)) -> SubscriberStore:
    return SqlAlchemySubscriberStore(db)


def get_notification_sender() -> NotificationSender:
    return ChecklistEmailSender()


def error_response(error: ChecklistError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers=CORS_HEADERS)


@router.options("")
async def checklist_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post(
    "",
    response_model=SubmissionResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def send_checklist(
    request: Request,
    store: SubscriberStore = Depends(get_subscriber_store),
    sender: NotificationSender = Depends(get_notification_sender),
):
    """
    Enregistre l'abonné et lui envoie l'offre par email.
    200 aussi quand l'offre a déjà été envoyée à cette adresse.
    """
    try:
        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"JSON invalide reçu: {e}")
            raise BadRequestError("Format de données invalide")

        result = await submit_checklist_request(payload, store, sender)
        return JSONResponse(status_code=200, content=result.to_dict(), headers=CORS_HEADERS)
    except ChecklistError as e:
        if e.status_code >= 500:
            logger.error(f"Erreur lors du traitement de la demande: {e.message} {e.details or ''}")
        return error_response(e)
    except Exception as e:
        logger.error(f"Erreur générale: {e}", exc_info=True)
        return error_response(ChecklistError("Erreur interne du serveur", details=str(e)))
