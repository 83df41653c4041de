"""
main.py - FastAPI Application
Stock quotes, ticker lookup, image generation and chat behind one API
"""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from typing import Optional
import logging
import time
from datetime import datetime, timezone

from app.core.config import Settings
from app.routers.chat import router as chat_router
from app.routers.image import router as image_router
from app.routers.stock import router as stock_router
from app.services.image_services import ImageGenerationService
from app.services.llm_service import LLMService
from app.services.market_data_services import MarketDataService

logger = logging.getLogger(__name__)

SERVICE_NAME = "Stock Insight API"
VERSION = "1.0.0"


def configure_logging(settings: Settings):
    handlers = [logging.StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE))

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


# ==================== LIFESPAN MANAGEMENT ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build provider clients from settings on startup, close them on shutdown.
    A client that cannot be built is left as None and its endpoint answers 503.
    """
    settings: Settings = app.state.settings

    logger.info("=" * 60)
    logger.info(f"Starting {SERVICE_NAME}")
    logger.info("=" * 60)

    app.state.market_service = MarketDataService()
    logger.info("✓ Market data service initialized")

    try:
        app.state.llm_service = LLMService(api_key=settings.API_KEY, model=settings.OPENAI_MODEL)
        logger.info("✓ LLM service initialized")
    except ValueError as e:
        app.state.llm_service = None
        logger.error(f"✗ LLM service initialization failed: {e}")

    try:
        app.state.image_service = ImageGenerationService(
            api_key=settings.BFL_API_KEY,
            base_url=settings.BFL_BASE_URL,
            poll_interval=settings.IMAGE_POLL_INTERVAL,
            max_attempts=settings.IMAGE_POLL_MAX_ATTEMPTS,
            http_timeout=settings.IMAGE_HTTP_TIMEOUT,
        )
        logger.info("✓ Image service initialized")
    except ValueError as e:
        app.state.image_service = None
        logger.error(f"✗ Image service initialization failed: {e}")

    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"{SERVICE_NAME} server running at http://{settings.HOST}:{settings.PORT}")

    try:
        yield
    finally:
        logger.info(f"Shutting down {SERVICE_NAME}")
        if app.state.llm_service is not None:
            await app.state.llm_service.close()
            logger.info("✓ LLM client closed")


# ==================== APPLICATION INITIALIZATION ====================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings)

    app = FastAPI(
        title=SERVICE_NAME,
        description="Stock snapshots, ticker lookup, AI chat and stock logo artwork",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.market_service = None
    app.state.llm_service = None
    app.state.image_service = None

    # ==================== MIDDLEWARE CONFIGURATION ====================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time header to all responses"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all incoming requests"""
        logger.info(f"Request: {request.method} {request.url.path}")
        response = await call_next(request)
        logger.info(f"Response: {response.status_code} for {request.url.path}")
        return response

    # ==================== EXCEPTION HANDLERS ====================

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Invalid request body",
                "details": jsonable_encoder(exc.errors()),
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.include_router(stock_router)
    app.include_router(image_router)
    app.include_router(chat_router)

    # ==================== ROOT ENDPOINTS ====================

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint - API information"""
        return {
            "service": SERVICE_NAME,
            "version": VERSION,
            "status": "operational",
            "documentation": "/docs",
            "endpoints": {
                "stock_summary": "/api/stock/{ticker}",
                "ticker_lookup": "/api/get-ticker",
                "chat": "/api/gpt",
                "image": "/generate-image",
            },
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Report which provider clients are available"""
        state = request.app.state
        services_status = {
            "market_data": "healthy" if state.market_service is not None else "unavailable",
            "llm": "healthy" if state.llm_service is not None else "unavailable",
            "image": "healthy" if state.image_service is not None else "unavailable",
        }
        overall_healthy = all(s == "healthy" for s in services_status.values())

        return JSONResponse(
            status_code=200 if overall_healthy else 503,
            content={
                "status": "healthy" if overall_healthy else "degraded",
                "services": services_status,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings: Settings = app.state.settings
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
