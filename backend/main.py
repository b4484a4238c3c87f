import sys
import logging
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from app.api.routes import router
from app.api.metrics import router as metrics_router
from app.core.config import get_settings
from app.core.errors import ErrorCodes, get_error_response
from app.core.limiter import limiter
from app.core.logging import configure_logging
from app.core.middleware import CorrelationIDMiddleware, TimeoutMiddleware

# Load environment variables
load_dotenv()

# Load and validate configuration
try:
    settings = get_settings()
except Exception as e:
    # Basic logger for startup errors
    logging.basicConfig(level=logging.ERROR)
    logging.getLogger(__name__).error(f"Failed to load configuration: {e}")
    sys.exit(1)

configure_logging(log_level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Traffic Charts API",
    description="Dimensional aggregation and chart specifications for traffic events",
    version="1.0.0"
)

# Store limiter and settings in app state for use in routes
app.state.limiter = limiter
app.state.settings = settings


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded with structured error response."""
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    error_info = get_error_response(ErrorCodes.RATE_LIMIT_EXCEEDED)
    error_info['correlation_id'] = correlation_id
    return JSONResponse(
        status_code=429,
        content=error_info,
        headers={
            "Retry-After": str(getattr(exc, 'retry_after', 60)),
            "X-Correlation-ID": correlation_id
        }
    )


app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed chart requests get the structured error body plus field errors."""
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    error_info = get_error_response(ErrorCodes.INVALID_REQUEST)
    error_info['correlation_id'] = correlation_id
    error_info['errors'] = jsonable_encoder(exc.errors())
    return JSONResponse(
        status_code=422,
        content=error_info,
        headers={"X-Correlation-ID": correlation_id}
    )


app.add_exception_handler(RequestValidationError, validation_error_handler)

# Middleware (last added is first executed)
app.add_middleware(TimeoutMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization", "X-Correlation-ID"],
    expose_headers=["X-Correlation-ID"]
)
app.add_middleware(CorrelationIDMiddleware)

logger.info(f"CORS allowed origins: {settings.allowed_origins_list}")

app.include_router(router, prefix="/api")
app.include_router(metrics_router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Traffic Charts API is running"}


logger.info("Application started successfully")
