"""
Erreurs métier du flux d'inscription.
Chaque erreur porte le message à renvoyer au client et le code HTTP associé.
"""
from typing import Optional


class ChecklistError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class BadRequestError(ChecklistError):
    status_code = 400


class ValidationError(BadRequestError):
    """Donnée saisie incorrecte, corrigible par l'utilisateur."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class StoreError(ChecklistError):
    """Le détail technique reste dans les logs, le client ne voit que le message."""

    def to_dict(self) -> dict:
        return {"error": self.message}


class NotificationError(ChecklistError):
    pass


class ConfigurationError(ChecklistError):
    pass
