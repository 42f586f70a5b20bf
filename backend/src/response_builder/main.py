from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from response_builder.api_codes import ApiCodeRegistry, BaseApiCode
from response_builder.builder import ResponseBuilder
from response_builder.config import ResponseBuilderSettings, settings as default_settings
from response_builder.dependencies import Builder, get_response_builder
from response_builder.logging import get_logger
from response_builder.responses import as_json_response

logger = get_logger(__name__)

_HTTP_STATUS_CODES: dict[int, BaseApiCode] = {
    401: BaseApiCode.AUTHENTICATION_EXCEPTION,
    404: BaseApiCode.HTTP_NOT_FOUND,
    503: BaseApiCode.SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: log the registry bounds the app will serve with."""
    registry = app.state.response_builder.registry
    logger.info("response_builder_ready", api_codes=len(registry), max_code=registry.max_code)
    yield


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Map the status onto a reserved code via _HTTP_STATUS_CODES, else HTTP_EXCEPTION."""
    builder = get_response_builder(request)
    status = exc.status_code if exc.status_code >= 400 else 500
    code = _HTTP_STATUS_CODES.get(status, BaseApiCode.HTTP_EXCEPTION)
    logger.warning("http_exception", status=status, detail=exc.detail, path=request.url.path)
    built = builder.error(code, placeholders={"message": exc.detail}, http_status=status)
    return as_json_response(built, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> Response:
    """Return 422 with the validation errors under ``data``."""
    builder = get_response_builder(request)
    built = builder.error(
        BaseApiCode.VALIDATION_EXCEPTION,
        data={"errors": jsonable_encoder(exc.errors())},
        http_status=422,
    )
    return as_json_response(built)


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    """Log unhandled exceptions and return a 500 envelope.

    Only the exception class name reaches the client; the traceback is logged.
    """
    logger.exception("unhandled_exception", path=request.url.path, method=request.method)
    builder = get_response_builder(request)
    built = builder.error(
        BaseApiCode.UNCAUGHT_EXCEPTION,
        placeholders={"message": type(exc).__name__},
        http_status=500,
    )
    return as_json_response(built)


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)


def create_app(
    settings: ResponseBuilderSettings | None = None,
    api_codes: Mapping[int, str] | None = None,
) -> FastAPI:
    """Wire the registry and builder into a FastAPI app.

    ``api_codes`` maps the application's user-range codes to message templates;
    the registry is frozen before the first request is served.
    """
    settings = settings or default_settings
    registry = ApiCodeRegistry.from_mapping(api_codes or {}, max_code=settings.max_code)

    app = FastAPI(lifespan=lifespan)
    app.state.response_builder = ResponseBuilder(registry, settings)
    install_exception_handlers(app)

    @app.get("/health")
    async def health(builder: Builder) -> Response:
        """Liveness check answering with a standard success envelope."""
        return as_json_response(builder.success(data={"status": "ok"}))

    return app


app = create_app()
