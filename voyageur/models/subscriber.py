"""
Modèle des abonnés ayant demandé l'offre du Voyageur Malin.
Une seule ligne par email ; checklist_sent ne repasse jamais à False.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Boolean

from ..database import Base
from ..services.validation import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH


def new_subscriber_id() -> str:
    return str(uuid.uuid4())


class Subscriber(Base):
    __tablename__ = "subscribers"

    id = Column(String(36), primary_key=True, default=new_subscriber_id)
    first_name = Column(String(MAX_NAME_LENGTH), nullable=False)
    last_name = Column(String(MAX_NAME_LENGTH), nullable=False)
    email = Column(String(MAX_EMAIL_LENGTH), unique=True, nullable=False, index=True)
    gdpr_consent = Column(Boolean, default=False, nullable=False)
    checklist_sent = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
