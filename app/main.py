import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response, Request, Depends, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.device import parse_device_info, summarize_device
from app.geolocation import lookup_ip_location
from app.location import build_location_info, reconcile_location
from app.logging_utils import setup_logging, RequestLoggingMiddleware, log_submission_data
from app.metrics import record_submission_outcome, get_metrics, get_metrics_content_type
from app.pages import render_index_page
from app.storage import (
    init_db,
    close_db,
    check_db_health,
    get_db,
    create_message,
    get_recent_messages,
    count_messages,
)
from app.utils import get_client_ip, mask_database_url
from app.schemas import (
    UNKNOWN,
    ErrorResponse,
    HealthResponse,
    MessageRecord,
    SendMessageRequest,
    SendMessageResponse,
    StatsResponse,
    validate_message_content,
)


# Setup structured JSON logging
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


SUBMISSION_CONFIRMATION = "Message sent anonymously!"
SUBMISSION_FAILED_ERROR = "Failed to send message. Please try again."
INVALID_PAYLOAD_ERROR = "Invalid request payload"


class BoardError(Exception):
    """Client-facing failure rendered as {"success": false, "error": ...}."""

    def __init__(self, status_code: int, error: str):
        super().__init__(error)
        self.status_code = status_code
        self.error = error


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    - Startup: Connect to the database and create tables
    - Shutdown: Release the connection pool
    """
    init_db()
    logger.info(f"Anonymous Message Board running on port {settings.PORT}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database URL: {mask_database_url(settings.DATABASE_URL)}")
    yield
    close_db()


app = FastAPI(
    title="Anonymous Message Board",
    description="Anonymous message submission with best-effort location and device enrichment",
    version="1.0.0",
    lifespan=lifespan,
)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(BoardError)
async def board_error_handler(request: Request, exc: BoardError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.error).model_dump(),
    )


# =============================================================================
# Health Check Routes
# =============================================================================

@app.get("/health/live", response_model=HealthResponse)
async def health_live() -> HealthResponse:
    """
    Liveness probe - always returns 200 once the app is running.
    """
    return HealthResponse(status="ok")


@app.get("/health/ready", response_model=HealthResponse)
def health_ready(response: Response) -> HealthResponse:
    """
    Readiness probe - returns 200 only if the database is reachable
    and the schema is applied, otherwise 503.
    """
    if not check_db_health():
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(
            status="not_ready",
            reason="Database not reachable or schema not applied"
        )

    return HealthResponse(status="ready")


# =============================================================================
# Form Route
# =============================================================================

@app.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """Render the submission form."""
    return HTMLResponse(content=render_index_page())


# =============================================================================
# Submission Route
# =============================================================================

def _reject(request: Request, status_code: int, error: str, result: str) -> BoardError:
    record_submission_outcome(result)
    log_submission_data(request=request, result=result)
    return BoardError(status_code, error)


@app.post(
    "/send-message",
    response_model=SendMessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Empty, oversized or malformed message"},
        500: {"model": ErrorResponse, "description": "Message could not be stored"},
    }
)
async def send_message(
    request: Request,
    db: Session = Depends(get_db)
) -> SendMessageResponse:
    """
    Accept an anonymous message and store it with sender metadata.

    - Validates the message (non-empty after trimming, at most 1000 characters)
    - Resolves the client IP and looks up its location (best-effort)
    - Reconciles IP, GPS and browser location hints
    - Classifies the device from the User-Agent and client-reported data
    """
    raw_body = await request.body()
    logger.debug(f"Request body size: {len(raw_body)} bytes")

    # A body that is not a JSON object carries no message
    try:
        body_dict = json.loads(raw_body) if raw_body else {}
    except ValueError as e:
        logger.debug(f"Unparseable body treated as empty: {e}")
        body_dict = {}
    if not isinstance(body_dict, dict):
        body_dict = {}

    try:
        submission = SendMessageRequest.model_validate(body_dict)
    except ValidationError as e:
        logger.warning(f"Validation error: {e}")
        raise _reject(request, status.HTTP_400_BAD_REQUEST, INVALID_PAYLOAD_ERROR, "validation_error")

    try:
        content = validate_message_content(submission.message)
    except ValueError as e:
        logger.warning(f"Message rejected: {e}")
        raise _reject(request, status.HTTP_400_BAD_REQUEST, str(e), "validation_error")

    client_ip = get_client_ip(request)
    user_agent = request.headers.get("user-agent") or UNKNOWN

    ip_location = await lookup_ip_location(client_ip)

    location = build_location_info(
        ip_location,
        gps_latitude=submission.gps_latitude,
        gps_longitude=submission.gps_longitude,
        gps_accuracy=submission.gps_accuracy,
        browser_timezone=submission.browser_timezone,
        browser_language=submission.browser_language,
    )
    best_location = reconcile_location(location)

    device_info = parse_device_info(user_agent, submission.device_info)

    message = await run_in_threadpool(
        create_message,
        db=db,
        content=content,
        ip_address=client_ip,
        location=location.model_dump(),
        device_info=device_info.model_dump(),
    )

    if message is None:
        raise _reject(request, status.HTTP_500_INTERNAL_SERVER_ERROR, SUBMISSION_FAILED_ERROR, "error")

    logger.info(
        f"New message from {device_info.deviceBrand} {device_info.deviceModel} "
        f"({device_info.operatingSystem}) in {best_location.city}, {best_location.country}"
    )
    record_submission_outcome("created")
    log_submission_data(
        request=request,
        result="created",
        location_source=best_location.source,
        device_type=device_info.deviceType,
    )

    return SendMessageResponse(
        message=SUBMISSION_CONFIRMATION,
        location=best_location,
        device=summarize_device(device_info),
    )


# =============================================================================
# Messages Route
# =============================================================================

@app.get("/messages", response_model=list[MessageRecord])
def list_messages(db: Session = Depends(get_db)) -> list[MessageRecord]:
    """
    Debug listing: the 50 most recent messages, newest first.
    Not intended for production exposure.
    """
    try:
        messages = get_recent_messages(db)
    except SQLAlchemyError:
        logger.exception("Error fetching messages")
        raise BoardError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch messages")

    return [
        MessageRecord(
            id=msg.id,
            content=msg.content,
            ipAddress=msg.ip_address,
            location=msg.location,
            deviceInfo=msg.device_info,
            timestamp=msg.timestamp,
        )
        for msg in messages
    ]


# =============================================================================
# Stats Route
# =============================================================================

@app.get("/stats", response_model=StatsResponse)
def get_statistics(db: Session = Depends(get_db)) -> StatsResponse:
    """Total number of stored messages."""
    try:
        total = count_messages(db)
    except SQLAlchemyError:
        logger.exception("Error getting stats")
        raise BoardError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to get stats")

    logger.info(f"GET /stats: {total} messages")
    return StatsResponse(total_messages=total)


# =============================================================================
# Metrics Route
# =============================================================================

@app.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus-style metrics."""
    return Response(
        content=get_metrics(),
        media_type=get_metrics_content_type()
    )
