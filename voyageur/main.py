import logging
from pathlib import Path

from dotenv import load_dotenv

# Charger le .env avant de lire la configuration (développement local uniquement)
backend_dir = Path(__file__).parent.parent
env_path = backend_dir / ".env"
loaded = load_dotenv(dotenv_path=env_path)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import inspect

from .config import get_settings, clear_settings_cache
from .database import Base, engine
from .errors import ChecklistError
from .routers import checklist, subscribers
from .routers.checklist import CORS_HEADERS
from .services.email_service import get_email_config_info

# Importer les modèles pour que SQLAlchemy les enregistre avant create_all()
from .models.subscriber import Subscriber  # noqa: F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

if loaded:
    logger.info(f"Variables d'environnement chargées depuis : {env_path}")
else:
    logger.warning(f"Aucun fichier .env chargé depuis : {env_path}")

clear_settings_cache()
app_settings = get_settings()

app = FastAPI(title=app_settings.app_name, version="0.1.0", redirect_slashes=False)

# Le formulaire peut être hébergé n'importe où : toutes les origines sont acceptées.
# GET pour /api/subscribers/status appelé depuis le navigateur
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.exception_handler(ChecklistError)
async def checklist_error_handler(request: Request, exc: ChecklistError):
    # Erreurs levées dans les dépendances (ex. base non configurée)
    logger.error(f"Erreur {exc.status_code} sur {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=CORS_HEADERS)


def create_tables():
    """Crée les tables manquantes dans la base de données."""
    if engine is None:
        logger.warning("⚠️ Base de données non configurée, création des tables ignorée")
        return

    expected_tables = list(Base.metadata.tables.keys())
    logger.info(f"Tables attendues : {', '.join(expected_tables)}")

    Base.metadata.create_all(bind=engine)

    existing_tables = inspect(engine).get_table_names()
    missing_tables = [t for t in expected_tables if t not in existing_tables]
    if missing_tables:
        logger.warning(f"⚠️ Tables manquantes : {', '.join(missing_tables)}")
    else:
        logger.info("✅ Toutes les tables ont été créées/vérifiées")


# Ne pas bloquer le démarrage si la base est indisponible
try:
    create_tables()
except Exception as e:
    logger.error(f"❌ Erreur lors de la création des tables : {str(e)}", exc_info=True)
    logger.warning("⚠️ Le serveur démarre quand même, l'inscription peut être indisponible")

app.include_router(checklist.router, prefix="/api")
app.include_router(subscribers.router, prefix="/api")


@app.get("/", tags=["root"])
async def root():
    return {"message": "Bienvenue sur le backend de l'Offre du Voyageur Malin"}


@app.get("/api/health", tags=["health"])
async def health():
    return {"status": "ok", "email": get_email_config_info()}
