from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import uvicorn
import logging
from dotenv import load_dotenv
load_dotenv()  # This loads the .env file

from skinadvisor.core.config import settings
from skinadvisor.core.initial_data import init_ingredient_index
from skinadvisor.api.essential_endpoints import router as essential_router
from skinadvisor.api.relay import RELAY_PATH, router as relay_router
from skinadvisor.services.cosmily_relay import InvalidMethod, RelayError
from skinadvisor.services.gemini_service import RoutineGenerationError

# Configure logging
handlers = [logging.StreamHandler()]
if settings.LOG_FILE:
    handlers.append(logging.FileHandler(settings.LOG_FILE))

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=handlers
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Build the ingredient index once; it is read-only afterwards
    app.state.ingredient_index = init_ingredient_index()
    logger.info(f"🚀 {settings.APP_NAME} ready ({settings.ENVIRONMENT})")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Skin trait analysis, routine generation and ingredient safety lookups",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include essential endpoints
app.include_router(
    essential_router,
    prefix=settings.API_PREFIX,
    tags=["skin-advisor"],
    responses={status.HTTP_404_NOT_FOUND: {"description": "Not found"}},
)
app.include_router(relay_router, tags=["ingredient-relay"])


# Root endpoint
@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "documentation": "/docs",
        "endpoints": [
            "POST /api/analyze - Upload an image for skin trait analysis",
            "POST /api/traits/toggle - Confirm or edit a skin trait",
            "POST /api/routine - Generate a routine with detected ingredients",
            "POST /api/routine/stream - Stream a routine with live ingredient detection",
            "POST /api/ingredients/detect - Detect ingredients in text",
            "GET /api/ingredients/{title} - Look up an ingredient",
            "POST /api/recommendations - Recommend ingredients for a skin assessment",
            "POST /analyzeIngredientList - Relay to the ingredient analysis API",
            "GET /api/health - Health check endpoint"
        ]
    }


# Error handlers
@app.exception_handler(RelayError)
async def relay_exception_handler(request: Request, exc: RelayError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    # Methods the relay route does not list still answer in the relay's error format
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED and request.url.path == RELAY_PATH:
        return JSONResponse(
            status_code=InvalidMethod.status_code,
            content={"message": InvalidMethod.message},
            headers=exc.headers,
        )
    return await http_exception_handler(request, exc)


@app.exception_handler(RoutineGenerationError)
async def routine_exception_handler(request: Request, exc: RoutineGenerationError):
    logger.error(f"Routine generation failed for {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"message": str(exc)})


if __name__ == "__main__":
    uvicorn.run(
        "skinadvisor.main:app",
        host=settings.HOST or "0.0.0.0",
        port=int(settings.PORT or 8000),
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
        workers=1,
    )
