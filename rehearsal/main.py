import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from rehearsal.config import configure_logging, ensure_dev_database_schema, settings
from rehearsal.db import session as db_session
from rehearsal.modules.analytics.router import router as analytics_router
from rehearsal.modules.conversations.router import router as conversations_router
from rehearsal.modules.llm_boundary.service import get_ai_service
from rehearsal.modules.rehearsals.router import router as rehearsals_router
from rehearsal.modules.scenarios.router import router as scenarios_router
from rehearsal.modules.scenarios.service import load_scenarios
from rehearsal.modules.scripts.router import router as scripts_router
from rehearsal.utils.envelope import (
    REQUEST_ID_HEADER,
    current_request_id,
    error_response,
    new_request_id,
    rehearsal_error_response,
    success_response,
)
from rehearsal.utils.errors import DatabaseError, RehearsalError, wrap

logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


@asynccontextmanager
async def _lifespan(_app: FastAPI):
    configure_logging(settings.log_level)
    if settings.env == "dev":
        ensure_dev_database_schema(str(db_session.engine.url))
    catalog = load_scenarios()
    logger.info("%s v%s ready with %d scenarios", settings.app_name, settings.app_version, len(catalog))
    yield


app = FastAPI(title="The Rehearsal AI", version=settings.app_version, lifespan=_lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)


@app.middleware("http")
async def _request_id_middleware(request: Request, call_next):
    request.state.request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request.state.request_id
    return response


def _json(request: Request, status_code: int, body: dict) -> JSONResponse:
    headers = {}
    request_id = current_request_id(request)
    if request_id:
        headers[REQUEST_ID_HEADER] = request_id
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def _log_error(request: Request, exc: RehearsalError) -> None:
    if exc.status_code >= 500:
        logger.exception("%s %s failed code=%s", request.method, request.url.path, exc.code, exc_info=exc)
    else:
        logger.warning("%s %s rejected code=%s: %s", request.method, request.url.path, exc.code, exc.message)


@app.exception_handler(RehearsalError)
async def _rehearsal_error_handler(request: Request, exc: RehearsalError) -> JSONResponse:
    _log_error(request, exc)
    return _json(request, exc.status_code, rehearsal_error_response(exc, request_id=current_request_id(request)))


@app.exception_handler(StarletteHTTPException)
async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    message = exc.detail if isinstance(exc.detail, str) else code.replace("_", " ").lower()
    details = None if isinstance(exc.detail, str) else exc.detail
    logger.warning("%s %s -> %s", request.method, request.url.path, exc.status_code)
    return _json(
        request,
        exc.status_code,
        error_response(code, message, details=details, request_id=current_request_id(request)),
    )


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("%s %s rejected: request validation failed", request.method, request.url.path)
    return _json(
        request,
        400,
        error_response(
            "VALIDATION_ERROR",
            "Invalid request data",
            details=exc.errors(),
            request_id=current_request_id(request),
            nathan_note="Nathan requires proper input validation",
        ),
    )


@app.exception_handler(SQLAlchemyError)
async def _database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    err = DatabaseError("database operation failed")
    logger.exception("%s %s database error", request.method, request.url.path, exc_info=exc)
    return _json(request, err.status_code, rehearsal_error_response(err, request_id=current_request_id(request)))


@app.exception_handler(Exception)
async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    err = wrap(exc)
    logger.exception("%s %s unexpected error", request.method, request.url.path, exc_info=exc)
    return _json(request, err.status_code, rehearsal_error_response(err, request_id=current_request_id(request)))


@app.get("/api/health")
def health(request: Request) -> dict:
    return success_response(
        {
            "status": "ok",
            "version": settings.app_version,
            "env": settings.env,
            "llm_mode": get_ai_service().mode(),
            "scenarios": len(load_scenarios()),
        },
        "The Rehearsal AI is operational",
        request_id=current_request_id(request),
        nathan_note="All 147 systems checked. Twice.",
    )


app.include_router(scenarios_router)
app.include_router(rehearsals_router)
app.include_router(conversations_router)
app.include_router(scripts_router)
app.include_router(analytics_router)
