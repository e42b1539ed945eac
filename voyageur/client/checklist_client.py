"""
Client HTTP du formulaire : appelle la route /api/send-checklist.

Sans backend configuré, aucun appel n'est fait et un résultat de secours est
retourné pour que le parcours utilisateur continue.
"""
import logging
from typing import Optional

import httpx

from ..config import get_settings, is_placeholder

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Merci ! Votre demande a bien été prise en compte."
GENERIC_ERROR_MESSAGE = "Une erreur est survenue. Veuillez réessayer."


def _json_object(response: httpx.Response) -> Optional[dict]:
    """Corps JSON de la réponse s'il s'agit d'un objet, None sinon."""
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


class ChecklistClientError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ChecklistClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (settings.checklist_api_url if base_url is None else base_url).rstrip("/")
        self.api_key = settings.checklist_api_key if api_key is None else api_key
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return not is_placeholder(self.base_url)

    def _headers(self) -> dict:
        if is_placeholder(self.api_key):
            return {}
        return {"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self._headers(),
            transport=self._transport,
        )

    async def subscribe_and_send_checklist(self, data: dict) -> dict:
        """
        Envoie le formulaire au backend.

        Returns:
            dict: la réponse du serveur, ou {"message", "fallback": True} sans backend.

        Raises:
            ChecklistClientError: réponse non 2xx ou erreur réseau.
        """
        if not self.is_configured:
            logger.warning("Backend non configuré, résultat de secours sans appel distant")
            return {"message": FALLBACK_MESSAGE, "fallback": True}

        try:
            async with self._client() as client:
                response = await client.post("/api/send-checklist", json=data)
        except httpx.HTTPError as e:
            logger.error(f"Erreur service checklist: {e}")
            raise ChecklistClientError(GENERIC_ERROR_MESSAGE) from e

        body = _json_object(response)
        if response.is_success:
            if body is None:
                logger.error(f"Réponse inattendue du service checklist ({response.status_code}): {response.text[:200]!r}")
                raise ChecklistClientError(GENERIC_ERROR_MESSAGE, status_code=response.status_code)
            return body

        message = (body or {}).get("error") or GENERIC_ERROR_MESSAGE
        logger.error(f"Erreur service checklist ({response.status_code}): {message}")
        raise ChecklistClientError(message, status_code=response.status_code)

    async def check_if_email_exists(self, email: str) -> Optional[dict]:
        """Retourne {"id", "checklist_sent"} si l'adresse est inscrite, None sinon ou en cas d'erreur."""
        if not self.is_configured:
            return None

        try:
            async with self._client() as client:
                response = await client.get("/api/subscribers/status", params={"email": email})
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Erreur vérification email: {e}")
            return None

        if not isinstance(data, dict) or not data.get("exists"):
            return None
        return {"id": data.get("id"), "checklist_sent": bool(data.get("checklist_sent"))}
