# Configuration de la base de données avec SQLAlchemy.
#
# STRATÉGIE :
# - DÉVELOPPEMENT LOCAL : SQLite local (voyageur.db) si DATABASE_URL n'est pas définie
# - PRODUCTION : PostgreSQL managé, DATABASE_URL obligatoire
#
# Sans DATABASE_URL en production, aucun moteur n'est créé et get_db() lève
# ConfigurationError à chaque requête.

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import get_settings
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DATABASE_URL = get_settings().database_url

if DATABASE_URL:
    connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
    engine = create_engine(DATABASE_URL, connect_args=connect_args)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    logger.info(f"Base de données : {engine.url.get_backend_name()}")
else:
    engine = None
    SessionLocal = None
    logger.error("DATABASE_URL manquante : la base de données n'est pas configurée")

Base = declarative_base()


def get_db():
    """
    Dépendance FastAPI qui injecte une session de base par requête.
    """
    if SessionLocal is None:
        raise ConfigurationError("Configuration serveur incorrecte")
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
