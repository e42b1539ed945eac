import os

# Valeurs laissées par défaut dans les fichiers .env d'exemple
_PLACEHOLDER_VALUES = {"", "your_checklist_api_url", "your_checklist_api_key"}


def is_placeholder(value: str) -> bool:
    return (value or "").strip() in _PLACEHOLDER_VALUES


class Settings:
    """Configuration de l'application, lit les variables d'environnement dynamiquement."""

    @property
    def app_name(self) -> str:
        return "Voyageur Malin Backend"

    @property
    def environment(self) -> str:
        env = os.getenv("ENV", "").lower()
        if env == "production" or os.getenv("PORT"):
            return "production"
        return "development"

    @property
    def database_url(self) -> str:
        """
        URL SQLAlchemy de la base.
        En développement on retombe sur une base SQLite locale ; en production
        DATABASE_URL est obligatoire (chaîne vide si absente).
        """
        url = os.getenv("DATABASE_URL", "").strip()
        if url:
            return url
        if self.environment == "production":
            return ""
        return "sqlite:///./voyageur.db"

    @property
    def resend_api_key(self) -> str:
        return os.getenv("RESEND_API_KEY", "")

    @property
    def resend_from_email(self) -> str:
        return os.getenv("RESEND_FROM_EMAIL", "Lhoman Group <noreply@lhomangroup.com>")

    @property
    def resend_reply_to(self) -> str:
        return os.getenv("RESEND_REPLY_TO", "")

    @property
    def emailjs_service_id(self) -> str:
        return os.getenv("EMAILJS_SERVICE_ID", "service_lhoman")

    @property
    def emailjs_template_id(self) -> str:
        return os.getenv("EMAILJS_TEMPLATE_ID", "template_checklist")

    @property
    def emailjs_public_key(self) -> str:
        return os.getenv("EMAILJS_PUBLIC_KEY", "")

    @property
    def offer_url(self) -> str:
        return os.getenv("OFFER_URL", "https://www.lhomangroup.com")

    # --- Côté client (formulaire) ---

    @property
    def checklist_api_url(self) -> str:
        return os.getenv("CHECKLIST_API_URL", "").strip()

    @property
    def checklist_api_key(self) -> str:
        return os.getenv("CHECKLIST_API_KEY", "").strip()

    @property
    def is_backend_configured(self) -> bool:
        return not is_placeholder(self.checklist_api_url)

    @property
    def booking_url(self) -> str:
        return os.getenv("BOOKING_URL", "https://www.lhomangroup.com")

    @property
    def submission_mode(self) -> str:
        mode = os.getenv("SUBMISSION_MODE", "inline").lower()
        return mode if mode in ("inline", "redirect") else "inline"


# Instance singleton de Settings (sans cache, lit les valeurs dynamiquement)
_settings_instance = None


def get_settings() -> Settings:
    """Retourne l'instance de Settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def clear_settings_cache():
    """Réinitialise l'instance de settings."""
    global _settings_instance
    _settings_instance = None
