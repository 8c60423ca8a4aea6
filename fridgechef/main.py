# FridgeChef API Main Entry Point
import logging
import sys
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from .deps import has_live_session, requires_session
from .errors import AppError, AuthenticationRequired, InvalidInput, UpstreamFailure, app_error_handler
from .infra.rate_limit import limiter
from .settings import settings
from .routers.auth import router as auth_router
from .routers.ready import router as ready_router
from .routers.recipes import router as recipes_router
from .routers.shares import router as shares_router
from .routers.upload import router as upload_router

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("fridgechef")

app = FastAPI(title="FridgeChef API", version="0.1.0")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(AppError, app_error_handler)


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return InvalidInput.default_message
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"Invalid {loc}: {first.get('msg')}" if loc else f"Invalid request body: {first.get('msg')}"


async def _gate_or(request: Request, error: AppError) -> JSONResponse:
    # body parsing runs before dependencies; keep 401 ahead of input errors
    if requires_session(request.scope.get("route")) and not has_live_session(request):
        error = AuthenticationRequired()
    return await app_error_handler(request, error)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return await _gate_or(request, InvalidInput(_describe_validation_error(exc)))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 400:
        return await _gate_or(request, InvalidInput(str(exc.detail)))
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return await app_error_handler(request, UpstreamFailure())


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ready_router, prefix="/api", tags=["ready"])
app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
app.include_router(upload_router, prefix="/api", tags=["upload"])
app.include_router(recipes_router, prefix="/api", tags=["recipes"])
app.include_router(shares_router, prefix="/api", tags=["shares"])

logger.info(f"FridgeChef API ready (ai_mode={settings.ai_mode}, images={settings.ai_images_enabled})")
