# bookstore/main.py
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException

from .auth import auth_router
from .catalog import books_router, genres_router
from .config import configure_logging, get_settings
from .errors import OrderError
from .models import ErrorResponse
from .orders import transactions_router


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging(get_settings().log_level)

    app = FastAPI(
        title="Bookstore API",
        description=(
            "Book and genre catalogue, user accounts and purchase "
            "transactions with stock tracking."
        ),
        version="1.0.0",
    )

    app.include_router(auth_router)
    app.include_router(books_router)
    app.include_router(genres_router)
    app.include_router(transactions_router)

    @app.get("/health")
    def health_check():
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.exception_handler(OrderError)
    def order_error_handler(request: Request, exc: OrderError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(HTTPException)
    def http_error_handler(request: Request, exc: HTTPException):
        body = ErrorResponse(message=str(exc.detail))
        return JSONResponse(
            status_code=exc.status_code,
            content=body.model_dump(exclude_none=True),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    def validation_error_handler(request: Request, exc: RequestValidationError):
        body = ErrorResponse(
            message="Invalid request body",
            error="invalid_input",
            details=jsonable_encoder(exc.errors()),
        )
        return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))

    @app.exception_handler(Exception)
    def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        body = ErrorResponse(message="Internal server error")
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))

    return app


app = create_app()
