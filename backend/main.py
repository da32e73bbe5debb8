import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.core.errors import ServiceError, Unauthorized
from backend.database import init_db
from backend.routes import auth_routes, student_routes, task_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
)

app = FastAPI(title='Task Assignment API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


def error_response(status_code: int, kind: str, detail, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'error': kind, 'detail': detail}, headers=headers)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    headers = {'WWW-Authenticate': 'Bearer'} if isinstance(exc, Unauthorized) else None
    return error_response(exc.status_code, exc.kind, exc.detail, headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            'field': '.'.join(str(part) for part in error['loc']),
            'message': error['msg'],
        }
        for error in exc.errors()
    ]
    return error_response(status.HTTP_400_BAD_REQUEST, 'ValidationError', errors)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception('Database error while handling %s %s', request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, 'InternalError', 'Database unavailable.')


@app.on_event('startup')
def initialize() -> None:
    config.validate_runtime_config()
    init_db()
    logger.info('Task Assignment API started (env=%s)', config.APP_ENV)


@app.get('/')
def root():
    return {'status': 'Task Assignment API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(student_routes.router, prefix='/students')
app.include_router(task_routes.router)
