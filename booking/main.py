import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from booking.core import config
from booking.core.errors import BookingError, StorageError, ValidationError
from booking.database import Base, engine, ensure_appointment_schema
from booking.dependencies import get_credential_store
from booking.models import admin_credential, appointment  # noqa: F401  registers tables
from booking.routes import admin_routes, appointment_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = FastAPI(title='Booking API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


def error_response(error: BookingError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={'error': error.kind, 'message': error.message},
    )


@app.exception_handler(BookingError)
async def handle_booking_error(request: Request, exc: BookingError) -> JSONResponse:
    if isinstance(exc, StorageError):
        logger.error('%s %s failed: %s', request.method, request.url.path, exc.message, exc_info=exc)
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    field = None
    if errors:
        location = [str(part) for part in errors[0].get('loc', ()) if part != 'body']
        field = '.'.join(location) or None

    message = f'Invalid value for {field!r}.' if field else 'Request body is invalid.'
    return error_response(ValidationError(message))


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()
        get_credential_store().ensure_initialized(config.DEFAULT_ADMIN_PASSWORD)
    except (SQLAlchemyError, StorageError):
        logger.exception('Database initialization failed. Check DATABASE_URL.')


@app.get('/api/health')
def health():
    return {'status': 'Booking API Running'}


app.include_router(appointment_routes.router, prefix='/api/appointments')
app.include_router(admin_routes.router, prefix='/api/admin')
