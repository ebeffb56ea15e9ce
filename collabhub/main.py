import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from collabhub.api.v1.router import router as v1_router
from collabhub.core.config import settings
from collabhub.core.db import engine
from collabhub.core.errors import DomainError
from collabhub.core.telemetry import setup_telemetry
from collabhub.schemas.common import ErrorResponse

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.log_level)
    yield
    await engine.dispose()


app = FastAPI(title="Collab Hub API", version="0.1.0", lifespan=lifespan)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    body = ErrorResponse(code=exc.code, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in errors]
    body = ErrorResponse(code="validation_error", message=message, details=details)
    return JSONResponse(status_code=400, content=body.model_dump())


@app.exception_handler(SQLAlchemyError)
async def persistence_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    log.exception("%s %s: persistence failure", request.method, request.url.path)
    body = ErrorResponse(code="internal", message="Something went wrong")
    return JSONResponse(status_code=500, content=body.model_dump())


setup_telemetry(app)
app.include_router(v1_router)
