"""
Règles de validation du formulaire d'inscription.
Appliquées côté client pour un retour immédiat et côté serveur comme contrôle de référence.
"""
import re
from typing import Any, Mapping

from ..errors import ValidationError
from ..schemas.subscriber_schema import SubscriberInput

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_FIELDS = ("firstName", "lastName", "email")

# Longueurs des colonnes de la table subscribers
MAX_NAME_LENGTH = 120
MAX_EMAIL_LENGTH = 255
MAX_LENGTHS = {
    "firstName": MAX_NAME_LENGTH,
    "lastName": MAX_NAME_LENGTH,
    "email": MAX_EMAIL_LENGTH,
}

MISSING_FIELDS_MESSAGE = "Veuillez remplir tous les champs obligatoires (prénom, nom et email)."
INVALID_EMAIL_MESSAGE = "Format d'email invalide : veuillez vérifier le champ email."
CONSENT_MESSAGE = "Vous devez accepter la politique de confidentialité (RGPD) pour continuer."
TOO_LONG_MESSAGE = "Le champ {label} ne doit pas dépasser {limit} caractères."

FIELD_LABELS = {"firstName": "prénom", "lastName": "nom", "email": "email"}


def _clean(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_REGEX.match(email or ""))


def validate_subscriber(data: Mapping[str, Any]) -> SubscriberInput:
    """
    Valide les champs bruts du formulaire (noms du front : firstName, lastName,
    email, gdprConsent) et retourne les données normalisées.

    Raises:
        ValidationError: à la première règle non respectée, avec le champ en cause.
    """
    for field in REQUIRED_FIELDS:
        if not _clean(data.get(field)):
            raise ValidationError(MISSING_FIELDS_MESSAGE, field=field)

    for field, limit in MAX_LENGTHS.items():
        if len(_clean(data[field])) > limit:
            raise ValidationError(TOO_LONG_MESSAGE.format(label=FIELD_LABELS[field], limit=limit), field=field)

    email = normalize_email(data["email"])
    if not is_valid_email(email):
        raise ValidationError(INVALID_EMAIL_MESSAGE, field="email")

    # Le consentement doit être exactement True, pas une valeur "truthy"
    if data.get("gdprConsent") is not True:
        raise ValidationError(CONSENT_MESSAGE, field="gdprConsent")

    return SubscriberInput(
        first_name=_clean(data["firstName"]),
        last_name=_clean(data["lastName"]),
        email=email,
        gdpr_consent=True,
    )
