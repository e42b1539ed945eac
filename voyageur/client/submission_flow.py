"""
État du formulaire d'inscription et parcours de soumission.

Deux modes :
- "inline" : le panneau de succès remplace le formulaire ;
- "redirect" : message de succès puis ouverture de la page de réservation,
  que l'appel au backend ait réussi ou non.
"""
import asyncio
import logging
import webbrowser
from typing import Awaitable, Callable, Optional

from ..config import get_settings
from ..errors import ValidationError
from ..services.validation import validate_subscriber
from .checklist_client import ChecklistClient, ChecklistClientError, GENERIC_ERROR_MESSAGE

logger = logging.getLogger(__name__)

INLINE_MODE = "inline"
REDIRECT_MODE = "redirect"

# Secondes avant l'ouverture de la page de réservation
REDIRECT_DELAY = 3.0
REDIRECT_DELAY_FALLBACK = 1.5

INLINE_SUCCESS_MESSAGE = "Offre envoyée avec succès ! Vérifiez votre boîte email."
REDIRECT_SUCCESS_MESSAGE = "Merci ! Vous allez être redirigé vers notre page de réservation..."


class SubmissionForm:
    def __init__(
        self,
        client: Optional[ChecklistClient] = None,
        mode: Optional[str] = None,
        booking_url: Optional[str] = None,
        open_url: Callable[[str], object] = webbrowser.open_new_tab,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        settings = get_settings()
        self.client = client or ChecklistClient()
        self.mode = mode or settings.submission_mode
        self.booking_url = booking_url or settings.booking_url
        self._open_url = open_url
        self._sleep = sleep

        self.message = ""
        self.is_loading = False
        self.is_success = False
        self.redirected_to: Optional[str] = None
        self.reset()

    def reset(self):
        self.first_name = ""
        self.last_name = ""
        self.email = ""
        self.gdpr_consent = False

    def update(self, **fields):
        """Met à jour les champs saisis (first_name, last_name, email, gdpr_consent)."""
        for name, value in fields.items():
            if name not in ("first_name", "last_name", "email", "gdpr_consent"):
                raise AttributeError(f"Champ inconnu : {name}")
            setattr(self, name, value)

    def to_payload(self) -> dict:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "gdprConsent": self.gdpr_consent,
        }

    async def submit(self) -> bool:
        """
        Valide localement puis envoie le formulaire.
        Retourne True si l'utilisateur voit un succès.
        """
        if self.is_loading:
            return False

        self.message = ""
        payload = self.to_payload()
        try:
            validate_subscriber(payload)
        except ValidationError as e:
            self.message = e.message
            return False

        self.is_loading = True
        try:
            if self.mode == REDIRECT_MODE:
                return await self._submit_redirect(payload)
            return await self._submit_inline(payload)
        finally:
            self.is_loading = False

    async def _submit_inline(self, payload: dict) -> bool:
        try:
            result = await self.client.subscribe_and_send_checklist(payload)
        except ChecklistClientError as e:
            logger.error(f"Erreur soumission: {e}")
            self.message = e.message or GENERIC_ERROR_MESSAGE
            return False

        self.message = result.get("message") or INLINE_SUCCESS_MESSAGE
        self.is_success = True
        self.reset()
        return True

    async def _submit_redirect(self, payload: dict) -> bool:
        # L'échec éventuel est masqué : seul le délai avant redirection change
        try:
            result = await self.client.subscribe_and_send_checklist(payload)
            used_fallback = bool(result.get("fallback"))
        except Exception as e:
            logger.warning(f"Échec de l'envoi masqué à l'utilisateur (mode redirection): {e}")
            used_fallback = True

        self.message = REDIRECT_SUCCESS_MESSAGE
        self.is_success = True
        self.reset()

        await self._sleep(REDIRECT_DELAY_FALLBACK if used_fallback else REDIRECT_DELAY)
        self._open_url(self.booking_url)
        self.redirected_to = self.booking_url
        return True
