import sys
import logging

from contextlib import asynccontextmanager
from importlib.metadata import version, PackageNotFoundError

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from sealbox.app.api.dependencies import get_correlation_id
from sealbox.app.api.encryption import router as encryption_router
from sealbox.app.api.signature import router as signature_router
from sealbox.app.core.config import Settings, get_settings
from sealbox.app.services.codec import get_codec
from sealbox.app.services.encryption import EncodingService
from sealbox.app.services.hashing import HmacHashPrimitive
from sealbox.app.services.signature import SignatureService

logger = logging.getLogger("sealbox.main")


def get_app_version() -> str:
    """
    Resolve application version deterministically.

    Falls back to the source-tree version when not installed.
    """
    try:
        return version("sealbox")
    except PackageNotFoundError:
        return "0.1.0"


def configure_logging(level: str = "INFO") -> None:
    """
    Route all sealbox loggers to stderr at the configured level.
    """
    logging.basicConfig(
        level=logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger("sealbox").setLevel(level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Guarantees:
    - Fail-fast startup if configuration is invalid
    - The HMAC secret is read once and never re-read
    - Services are bound once and shared by all requests
    """
    logger.info(
        "sealbox_startup_begin",
        extra={
            "service": "sealbox",
            "version": get_app_version(),
        },
    )

    # ------------------------------------------------------------------
    # Load and validate configuration (FAIL FAST)
    # ------------------------------------------------------------------
    try:
        settings = Settings()
    except Exception:
        logger.exception("invalid_sealbox_configuration")
        raise

    if getattr(app.state, "settings", None) is not None:
        raise RuntimeError("settings already initialized")

    app.state.settings = settings
    logging.getLogger("sealbox").setLevel(settings.log_level)

    # ------------------------------------------------------------------
    # Default primitives
    # ------------------------------------------------------------------
    app.state.signature_service = SignatureService(
        HmacHashPrimitive(
            settings.hmac_secret.get_secret_value(),
            algorithm=settings.hmac_algorithm,
        )
    )
    app.state.encoding_service = EncodingService(get_codec(settings.codec))

    logger.info(
        "sealbox_services_ready",
        extra={
            "hmac_algorithm": settings.hmac_algorithm,
            "codec": settings.codec,
        },
    )

    try:
        yield
    finally:
        logger.info("sealbox_shutdown_begin")
        app.state.settings = None
        app.state.signature_service = None
        app.state.encoding_service = None


def _request_correlation_id(request: Request) -> str:
    return get_correlation_id(request.headers.get("x-correlation-id"))


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> ORJSONResponse:
    """
    Missing or malformed JSON bodies are client errors (400), matching
    the status used for body-shape violations.
    """
    return ORJSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                for err in exc.errors()
            ]
        },
        headers={"X-Correlation-ID": _request_correlation_id(request)},
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """
    Last-resort handler: log the failure with its traceback and return a
    generic 500 that leaks no internals.
    """
    correlation_id = _request_correlation_id(request)
    logger.exception(
        "unhandled_request_error",
        exc_info=exc,
        extra={
            "trace_id": correlation_id,
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
        },
    )
    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
        headers={"X-Correlation-ID": correlation_id},
    )


def create_app() -> FastAPI:
    """
    Application factory for the sealbox service.
    """
    app = FastAPI(
        title="sealbox",
        description=(
            "HMAC payload signing and reversible per-field encoding."
        ),
        version=get_app_version(),
        docs_url="/docs",
        redoc_url=None,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # Internal service; CORS enforced at ingress
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[],
        allow_credentials=False,
        allow_methods=["POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(signature_router)
    app.include_router(encryption_router)

    @app.get(
        "/healthz",
        tags=["Monitoring"],
        summary="Liveness and readiness probe",
    )
    async def health_check():
        """
        Verifies that the runtime is alive and correctly initialized.

        NOTE:
        - Does NOT perform cryptographic operations
        - Does NOT expose the HMAC secret
        """
        settings = getattr(app.state, "settings", None)
        return ORJSONResponse(
            content={
                "status": "ok" if settings is not None else "starting",
                "service": "sealbox",
                "version": app.version,
                "runtime": f"python {sys.version.split()[0]}",
                "hmac_algorithm": settings.hmac_algorithm if settings else None,
                "codec": settings.codec if settings else None,
            }
        )

    return app


app = create_app()


def main() -> None:
    """
    Console entrypoint: serve the application with uvicorn.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    import uvicorn

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        workers=1,
    )


if __name__ == "__main__":
    main()
