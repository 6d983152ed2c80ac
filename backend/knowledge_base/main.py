import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from knowledge_base.core.config import settings
from knowledge_base.core.logging import setup_logging
from knowledge_base.core.request_id import RequestIdMiddleware
from knowledge_base.core.response import err, ok
from knowledge_base.core.errors import AppError
from knowledge_base.db.auto_migrate import run_migrations_safely
from knowledge_base.db.init_db import reset_db
from knowledge_base.db.session import engine
from knowledge_base.api.routes import auth, categories, articles, uploads

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    run_migrations_safely()
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.add_middleware(RequestIdMiddleware)

origins = [x.strip() for x in settings.ALLOW_ORIGINS.split(",") if x.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["http://localhost:3000"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(categories.router)
app.include_router(articles.router)
app.include_router(uploads.router)
app.include_router(uploads.public_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return err(request, exc.code, exc.message, exc.status_code, exc.details or {})


@app.exception_handler(RequestValidationError)
async def validation_handler(request: Request, exc: RequestValidationError):
    return err(request, "VALIDATION_ERROR", "Validation failed", 400, {"errors": exc.errors()})


@app.get("/health")
def health():
    now = datetime.now(timezone.utc).isoformat()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Health check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content={"status": "ERROR", "timestamp": now, "error": "Database connection failed"},
        )
    return {"status": "OK", "timestamp": now, "database": {"connected": True, "backend": engine.url.get_backend_name()}}


if settings.APP_ENV == "development":

    @app.post("/api/dev/reset-db")
    def dev_reset_db(request: Request):
        reset_db()
        logger.warning("Database reset via dev endpoint")
        return ok(request, {"message": "Database reset successfully"})
