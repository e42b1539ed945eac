"""
Service d'email de l'offre du Voyageur Malin.

Transport principal : Resend (https://resend.com/docs).
Transport de secours : journalise l'intention d'envoi sans rien délivrer.
"""
import html
import logging
from typing import List, Optional, Protocol

import resend

from ..config import get_settings
from ..errors import NotificationError

logger = logging.getLogger(__name__)

EMAIL_SUBJECT = "🎉 Votre Offre du Voyageur Malin - Abidjan"

CHECKLIST_STEPS = [
    ("🎯 Étape 1 : Définir votre stratégie (10 minutes)", [
        "Budget maximal par nuit : _____ FCFA",
        "Mes 3 impératifs : sécurité, cuisine, calme",
        "Mes 3 envies : jardin, proximité, immersion locale",
        "Durée du séjour : _____ jours",
    ]),
    ("🔍 Étape 2 : Recherche stratégique (30 minutes)", [
        "Ouvrir Airbnb et filtrer par \"chambre privée\"",
        "Rechercher \"Abidjan, Cocody Angré\" comme destination",
        "Vérifier l'accès complet aux espaces communs",
        "Comparer avec les tarifs d'hôtels équivalents",
        "Lire attentivement les 5 derniers avis",
    ]),
    ("🏠 Étape 3 : Critères de sélection incontournables", [
        "Cuisine entièrement équipée et accessible 24h/24",
        "Salon spacieux avec espace de travail",
        "Gardien ou système de sécurité permanent",
        "Service de ménage inclus (fréquence à vérifier)",
        "Quartier sécurisé (Cocody Angré recommandé)",
        "Wi-Fi haut débit inclus",
    ]),
    ("💬 Étape 4 : Questions à poser avant de réserver", [
        "Puis-je recevoir des invités dans les espaces communs ?",
        "Y a-t-il des frais cachés (électricité, eau, ménage) ?",
        "Quelle est la politique d'annulation ?",
        "Les transports publics sont-ils accessibles ?",
        "Y a-t-il un supermarché à proximité ?",
    ]),
    ("🛡️ Étape 5 : Sécuriser votre réservation", [
        "Vérifier l'identité du propriétaire (profil vérifié)",
        "Demander des photos récentes des espaces",
        "Confirmer les modalités d'arrivée et de départ",
        "Sauvegarder les contacts d'urgence",
        "Prendre une assurance voyage si nécessaire",
    ]),
]

PRO_TIP = (
    "Pour des séjours de plus de 7 jours, contactez directement le propriétaire via la "
    "messagerie de la plateforme pour négocier un tarif dégressif. Vous pouvez économiser jusqu'à 20% !"
)


def _get_resend_api_key() -> Optional[str]:
    return get_settings().resend_api_key or None


def is_email_service_configured() -> bool:
    """Vérifie si le transport principal (Resend) est configuré."""
    return bool(_get_resend_api_key())


def get_email_config_info() -> dict:
    settings = get_settings()
    return {
        "api_key_configured": bool(settings.resend_api_key),
        "from_email": settings.resend_from_email,
        "fallback_service_id": settings.emailjs_service_id,
        "configured": is_email_service_configured(),
    }


def render_checklist_html(first_name: str, offer_url: Optional[str] = None) -> str:
    """Génère le HTML de l'email ; seul le prénom varie."""
    offer_url = offer_url or get_settings().offer_url
    name = html.escape(first_name)

    steps_html = ""
    for title, items in CHECKLIST_STEPS:
        items_html = "".join(
            f'<li style="margin: 8px 0; color: #4a5568;">✓ {html.escape(item)}</li>'
            for item in items
        )
        steps_html += f"""
                <div style="background: #f8fafc; margin: 20px 0; padding: 25px; border-left: 5px solid #ff1950; border-radius: 8px;">
                    <h3 style="color: #2d3748; font-size: 18px; margin: 0 0 15px 0;">{html.escape(title)}</h3>
                    <ul style="list-style: none; padding-left: 0; margin: 0;">{items_html}</ul>
                </div>
        """

    return f"""
        <!DOCTYPE html>
        <html lang="fr">
        <head>
            <meta charset="utf-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
            <title>Votre Offre du Voyageur Malin</title>
        </head>
        <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; background: #f5f5f5; margin: 0; padding: 20px;">
            <div style="max-width: 600px; margin: 0 auto; background: white; border-radius: 12px; overflow: hidden;">
                <div style="background: linear-gradient(135deg, #ff1950, #e6174a); color: white; padding: 40px 30px; text-align: center;">
                    <h1 style="font-size: 28px; margin: 0 0 8px 0;">🎉 Votre Offre du Voyageur Malin</h1>
                    <p style="margin: 0; font-size: 16px;">Économies &amp; Confort à Abidjan</p>
                </div>

                <div style="padding: 40px 30px;">
                    <p style="font-size: 18px; color: #2d3748;">Bonjour {name} ! 👋</p>
                    <p style="color: #4a5568;">Merci de votre confiance ! Voici votre offre complète pour transformer vos séjours à Abidjan en expériences inoubliables, confortables et économiques.</p>
                    {steps_html}
                    <div style="background: linear-gradient(135deg, #667eea, #764ba2); color: white; padding: 25px; border-radius: 8px; margin: 30px 0; text-align: center;">
                        <strong style="display: block; font-size: 18px; margin-bottom: 10px;">💡 Astuce Pro Exclusive :</strong>
                        {html.escape(PRO_TIP)}
                    </div>

                    <div style="text-align: center;">
                        <a href="{html.escape(offer_url, quote=True)}" style="display: inline-block; background: #ff1950; color: white; padding: 15px 30px; text-decoration: none; border-radius: 8px; font-weight: 600;">
                            🏡 Découvrir nos offres exclusives
                        </a>
                    </div>

                    <p style="margin-top: 30px; text-align: center; color: #4a5568;">Bon voyage et profitez bien de votre séjour malin à Abidjan ! 🌍✈️</p>
                    <p style="text-align: center; font-style: italic; color: #4a5568;">L'équipe Lhoman Group</p>
                </div>

                <div style="background: #2d3748; color: #a0aec0; text-align: center; padding: 30px; font-size: 14px;">
                    <p><strong>© Lhoman Group. Tous droits réservés.</strong></p>
                    <p>Vous recevez cet email car vous avez demandé notre offre gratuite sur notre site web.</p>
                    <p>
                        <a href="mailto:contact@lhomangroup.com" style="color: #ff1950;">Nous contacter</a> |
                        <a href="https://www.lhomangroup.com/privacy" style="color: #ff1950;">Politique de confidentialité</a>
                    </p>
                </div>
            </div>
        </body>
        </html>
        """


def render_checklist_text(first_name: str, offer_url: Optional[str] = None) -> str:
    """Version texte brut, pour une meilleure délivrabilité."""
    offer_url = offer_url or get_settings().offer_url
    steps_text = ""
    for title, items in CHECKLIST_STEPS:
        steps_text += f"\n{title}\n"
        steps_text += "".join(f"  - {item}\n" for item in items)

    return f"""
Votre Offre du Voyageur Malin - Abidjan

Bonjour {first_name},

Merci de votre confiance ! Voici votre offre complète pour vos séjours à Abidjan.
{steps_text}
Astuce Pro : {PRO_TIP}

Découvrir nos offres exclusives : {offer_url}

---
L'équipe Lhoman Group
    """


class EmailTransport(Protocol):
    name: str

    def send(self, to: str, subject: str, html_content: str, text_content: str) -> str:
        ...


class ResendTransport:
    name = "resend"

    def send(self, to: str, subject: str, html_content: str, text_content: str) -> str:
        api_key = _get_resend_api_key()
        if not api_key:
            raise NotificationError("RESEND_API_KEY non configurée")

        settings = get_settings()
        resend.api_key = api_key
        params = {
            "from": settings.resend_from_email,
            "to": [to],
            "subject": subject,
            "html": html_content,
            "text": text_content,
        }
        if settings.resend_reply_to:
            params["reply_to"] = [settings.resend_reply_to]

        response = resend.Emails.send(params)
        return response.get("id", "N/A")


class LoggedFallbackTransport:
    """
    Transport de secours : aucune livraison réelle, l'envoi est seulement journalisé.
    Brancher ici un vrai fournisseur (SMTP, SES...) si la délivrance compte.
    """
    name = "fallback"

    def __init__(self):
        self.sent: List[dict] = []

    def send(self, to: str, subject: str, html_content: str, text_content: str) -> str:
        settings = get_settings()
        logger.warning(
            f"📧 ENVOI EMAIL SIMULÉ : destinataire={to}, sujet={subject!r}, "
            f"service={settings.emailjs_service_id}, template={settings.emailjs_template_id}"
        )
        self.sent.append({"to": to, "subject": subject})
        return f"simulated-{len(self.sent)}"


class NotificationSender(Protocol):
    async def send(self, to_email: str, first_name: str) -> bool:
        ...


class ChecklistEmailSender:
    def __init__(
        self,
        primary: Optional[EmailTransport] = None,
        fallback: Optional[EmailTransport] = None,
    ):
        self.primary = primary or ResendTransport()
        self.fallback = fallback or LoggedFallbackTransport()

    async def send(self, to_email: str, first_name: str) -> bool:
        """
        Envoie l'offre à l'abonné.

        Returns:
            bool: True si l'email a été accepté par un transport. Un succès via le
            transport de secours n'est pas une garantie de livraison.
        """
        html_content = render_checklist_html(first_name)
        text_content = render_checklist_text(first_name)

        try:
            message_id = self.primary.send(to_email, EMAIL_SUBJECT, html_content, text_content)
            logger.info(f"Email envoyé avec succès à {to_email} via {self.primary.name}. ID: {message_id}")
            return True
        except Exception as e:
            logger.warning(f"Échec de l'envoi via {self.primary.name} ({e}), bascule sur {self.fallback.name}")

        try:
            message_id = self.fallback.send(to_email, EMAIL_SUBJECT, html_content, text_content)
            logger.info(f"Email pris en charge par {self.fallback.name} pour {to_email}. ID: {message_id}")
            return True
        except Exception as e:
            logger.error(f"Erreur d'envoi via {self.fallback.name}: {str(e)}", exc_info=True)
            return False
