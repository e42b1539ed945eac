# Importer tous les modèles pour que create_all() les enregistre
from .subscriber import Subscriber

__all__ = [
    "Subscriber",
]
