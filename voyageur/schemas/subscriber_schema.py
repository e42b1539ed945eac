from typing import Optional

from pydantic import BaseModel


class SubscriberInput(BaseModel):
    """Données d'un abonné après validation et normalisation."""
    first_name: str
    last_name: str
    email: str
    gdpr_consent: bool = True


class SubmissionResponse(BaseModel):
    message: str
    subscriber_id: Optional[str] = None
    fallback: Optional[bool] = None


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class SubscriberStatusOut(BaseModel):
    id: Optional[str] = None
    exists: bool
    checklist_sent: bool
