# backend/main.py
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from config import Settings, settings as default_settings
from database import Database
from utils.logging_setup import configure_logging
from utils.response import register_exception_handlers

# Routers
from routes.auth import router as auth_router
from routes.users import router as users_router
from routes.categories import router as categories_router
from routes.products import router as products_router
from routes.transactions import router as transactions_router
from routes.logs import router as logs_router

logger = logging.getLogger(__name__)


def create_app(settings: Settings = None, database: Database = None) -> FastAPI:
    """Build the API. The database handle is owned by the app and closed on shutdown."""
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE or None)

    db = database or Database(settings.DATABASE_URL, timeout=settings.DB_TIMEOUT_SECONDS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Connecting to database...")
        db.create_all()
        logger.info("Connected to database")
        yield
        db.dispose()

    app = FastAPI(title="StockLab API", version="1.0.0", lifespan=lifespan)
    app.state.db = db
    app.state.settings = settings

    # CORS Configuration
    origins = ["http://localhost:5173", "http://127.0.0.1:5173"]
    if settings.FRONTEND_URL:
        origins.append(settings.FRONTEND_URL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(categories_router)
    app.include_router(products_router)
    app.include_router(transactions_router)
    app.include_router(logs_router)

    @app.get("/")
    def read_root():
        return {"status": "success", "message": "StockLab API is running"}

    return app


app = create_app()
