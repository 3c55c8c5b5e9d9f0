from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

# IMPORT ROUTERS
from nexus_engine.routers.health import router as health_router
from nexus_engine.routers.analysis import router as analysis_router
from nexus_engine.routers.pipeline import router as pipeline_router
from nexus_engine.routers.assistant import router as assistant_router

from nexus_engine import __version__
from nexus_engine.config import get_settings
from nexus_engine.core.exceptions import (
    ExternalServiceException,
    StageOrderException,
    StageTimeoutException,
)
from nexus_engine.core.log_config import configure_logging
from nexus_engine.services.cache import reset_cache


# SWAGGER UI: tag display order
_OPENAPI_TAGS = [
    {"name": "Root"},
    {"name": "Health"},
    {"name": "Analysis"},
    {"name": "Pipeline"},
    {"name": "Assistant"},
]

# FASTAPI APPLICATION CONFIGURATION
settings = get_settings()

app = FastAPI(
    title=f"{settings.APP_NAME} API",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=_OPENAPI_TAGS,
)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


# REGISTER EXCEPTION HANDLERS
def _error(status_code: int, exc: Exception, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "detail": str(exc)})


@app.exception_handler(StageOrderException)
async def stage_order_handler(request: Request, exc: StageOrderException):
    return _error(status.HTTP_409_CONFLICT, exc, "stage_order")


@app.exception_handler(StageTimeoutException)
async def stage_timeout_handler(request: Request, exc: StageTimeoutException):
    return _error(status.HTTP_504_GATEWAY_TIMEOUT, exc, "stage_timeout")


@app.exception_handler(ExternalServiceException)
async def external_service_handler(request: Request, exc: ExternalServiceException):
    return _error(status.HTTP_502_BAD_GATEWAY, exc, exc.service)


# REGISTER ROUTERS (order matches _OPENAPI_TAGS / Swagger UI display order)
app.include_router(health_router)       # Health
app.include_router(analysis_router, prefix=settings.API_V1_PREFIX)     # Analysis
app.include_router(pipeline_router, prefix=settings.API_V1_PREFIX)     # Pipeline
app.include_router(assistant_router, prefix=settings.API_V1_PREFIX)    # Assistant


# ROOT ENDPOINT
@app.get("/", tags=["Root"], summary="Root endpoint")
async def root():
    return {
        "service": f"{settings.APP_NAME} API",
        "version": __version__,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "status": "running"
    }


# STARTUP EVENT
@app.on_event("startup")
async def startup_event():
    configure_logging(get_settings())


# SHUTDOWN EVENT
@app.on_event("shutdown")
async def shutdown_event():
    reset_cache()


# RUN WITH UVICORN
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "nexus_engine.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
