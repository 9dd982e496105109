from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status, APIRouter
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from telemed.config.database import engine, Base, settings
from telemed.config.redis_config import redis_config
from telemed.routes import appointment, chat, doctor, notification, reminder
from telemed.utils.exceptions import BookingError
from telemed.utils.response import APIResponse
import telemed.models  # noqa: F401  registers every table on Base.metadata
import logging

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger("telemed")

Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    redis_config.close()


app = FastAPI(
    title=settings.api_title,
    description="""
    Telemedicine Appointment Booking API

    ### Features:
    * **Doctors & timetables**: weekly availability windows per doctor
    * **Slots**: 30-minute start times derived from the timetable, with booked ones filtered out
    * **Booking**: pending requests, conflict detection with alternative slots
    * **Lifecycle**: doctor accepts or declines, then marks complete
    * **Notifications, chat and reminders**

    ### Business Rules:
    * Two active appointments of one doctor never overlap in time
    * Declining requires a reason
    * Cancelled and completed appointments are final
    """,
    version=settings.api_version,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.error(f"{exc.error_type} on {request.url.path}: {exc.message}")
    return APIResponse.error(
        message=exc.message,
        error_type=exc.error_type,
        status_code=exc.status_code,
        details=exc.details
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return APIResponse.error(
        message=str(exc.detail),
        error_type="HTTPException",
        status_code=exc.status_code
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        errors.append({
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    return APIResponse.error(
        message="Validation Error",
        error_type="ValidationError",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        details=errors
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}")
    return APIResponse.error(
        message="Internal server error",
        error_type="InternalError",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


system_router = APIRouter(prefix="/api", tags=["System"])

@system_router.get("/health")
def health_check():
    """Health check endpoint for monitoring"""
    return APIResponse.success({
        "status": "healthy",
        "service": "telemed-api",
        "version": settings.api_version,
        "redis": "connected" if redis_config.test_connection() else "unavailable"
    })

app.include_router(system_router)

app.include_router(doctor.router, prefix="/api/v1")
app.include_router(appointment.router, prefix="/api/v1")
app.include_router(notification.router, prefix="/api/v1")
app.include_router(chat.router, prefix="/api/v1")
app.include_router(chat.chatbot_router, prefix="/api/v1")
app.include_router(reminder.router, prefix="/api/v1")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "telemed.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level
    )
