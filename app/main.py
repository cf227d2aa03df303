from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
import logging

load_dotenv()

from app.config import settings
from app.core.dependencies import close_http_clients
from app.core.exceptions import RepositoryException
from app.core.logging import configure_logging
from app.repositories.assessment_repository import AssessmentRepository

# IMPORT ROUTERS
from app.routers.health import router as health_router
from app.routers.scoring import router as scoring_router
from app.routers.assessments import router as assessments_router
from app.routers.assessments import repository_exception_handler, validation_exception_handler
from app.routers.crm import router as crm_router

configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
logger = logging.getLogger(__name__)


# SWAGGER UI — tag display order
_OPENAPI_TAGS = [
    {"name": "Root"},
    {"name": "Health"},
    {"name": "Scoring"},
    {"name": "Assessments"},
    {"name": "CRM"},
]

# FASTAPI APPLICATION CONFIGURATION
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=_OPENAPI_TAGS,
)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

# REGISTER EXCEPTION HANDLERS
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RepositoryException, repository_exception_handler)

# REGISTER ROUTERS (order matches _OPENAPI_TAGS / Swagger UI display order)
app.include_router(health_router)       # Health
app.include_router(scoring_router)      # Scoring
app.include_router(assessments_router)  # Assessments
app.include_router(crm_router)          # CRM


# ROOT ENDPOINT
@app.get("/", tags=["Root"], summary="Root endpoint")
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "status": "running"
    }


@app.on_event("startup")
async def startup_event():
    logger.info("app_starting", extra={"version": settings.APP_VERSION, "env": settings.APP_ENV})

    if not settings.SNOWFLAKE_ACCOUNT:
        logger.warning("snowflake_not_configured")
        return
    try:
        AssessmentRepository().ensure_table()
    except RepositoryException as e:
        logger.warning("ensure_table_failed", extra={"error": str(e)})


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("app_stopping")
    await close_http_clients()


# RUN WITH UVICORN
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
