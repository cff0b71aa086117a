"""FastAPI application for the excel generator and web page reader."""

import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from toolbox_api import __version__
from toolbox_api.config import settings, validate_settings_on_startup
from toolbox_api.models import (
    DownloadLink,
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
    ServiceResponse,
    WebPageContentResponse,
)
from toolbox_api.services.excel_styles import ExcelConfig
from toolbox_api.services.retention import RetentionSweeper
from toolbox_api.services.web_page_reader import WebPageReader
from toolbox_api.services.workbook_builder import (
    DOWNLOADS_PATH,
    WorkbookBuilder,
    download_url,
)
from toolbox_api.utils.exceptions import (
    ErrorCode,
    GenerationError,
    ToolboxError,
    ValidationError,
)
from toolbox_api.utils.logging import (
    clear_context,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

# Configure structured logging using settings
configure_logging(
    level=settings.log_level_int,
    use_structured_formatter=True,
)
logger = get_logger(__name__)


def _envelope(envelope: ServiceResponse) -> JSONResponse:
    return JSONResponse(
        status_code=envelope.status_code,
        content=envelope.model_dump(mode="json", by_alias=True),
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    exports_path = settings.exports_path
    exports_path.mkdir(parents=True, exist_ok=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> Any:
        sweeper: RetentionSweeper | None = None
        if settings.enable_retention_sweeper:
            sweeper = RetentionSweeper(
                exports_path,
                max_age=settings.retention_max_age,
                interval=settings.retention_interval,
            )
            sweeper.start()
        app.state.retention_sweeper = sweeper
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.stop()
            app.state.retention_sweeper = None

    app = FastAPI(
        title="Toolbox API",
        description=(
            "Generates formatted Excel workbooks from tabular definitions and "
            "extracts the main readable text of web pages."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    validate_settings_on_startup(settings)

    app.state.workbook_builder = WorkbookBuilder(exports_path)
    app.state.web_page_reader = WebPageReader(
        timeout=settings.fetch_timeout_seconds,
        user_agent=settings.fetch_user_agent,
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Any:
        """Assign a request ID, expose it for log correlation and echo it back."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_request_id(request_id)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()

    @app.exception_handler(ToolboxError)
    async def toolbox_exception_handler(
        request: Request, exc: ToolboxError
    ) -> JSONResponse:
        """Translate domain errors into the response envelope."""
        request_id = getattr(request.state, "request_id", get_request_id())
        log = logger.warning if exc.http_status < 500 else logger.error
        log(
            f"Toolbox Error: {exc.message}",
            error_code=exc.error_code.value,
            http_status=exc.http_status,
        )
        return _envelope(
            ServiceResponse.failure(
                message=exc.message,
                status_code=exc.http_status,
                error_code=exc.error_code,
                details=exc.details,
                request_id=request_id,
            )
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed request bodies and queries as 400s."""
        request_id = getattr(request.state, "request_id", get_request_id())
        errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        logger.warning("Request validation failed", errors=errors)
        return _envelope(
            ServiceResponse.failure(
                message=f"Invalid request: {'; '.join(errors)}",
                status_code=status.HTTP_400_BAD_REQUEST,
                error_code=ErrorCode.VALIDATION_FAILED,
                details={"validation_errors": errors},
                request_id=request_id,
            )
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Wrap framework HTTP errors in the response envelope."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.warning(f"HTTP Error: {exc.detail}", status_code=exc.status_code)
        return _envelope(
            ServiceResponse.failure(
                message=str(exc.detail),
                status_code=exc.status_code,
                request_id=request_id,
            )
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all handler for unexpected errors.

        Logs the full exception and returns a generic message unless debug
        mode is on.
        """
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.exception(
            f"Unexpected error: {type(exc).__name__}",
            error_type=type(exc).__name__,
        )
        if settings.debug:
            detail = f"Internal server error: {type(exc).__name__}: {exc}"
        else:
            detail = "Internal server error. Please try again later."
        return _envelope(
            ServiceResponse.failure(
                message=detail,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                error_code=ErrorCode.INTERNAL_ERROR,
                request_id=request_id,
            )
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> dict[str, Any]:
        """Check the health status of the service."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": __version__,
        }

    @app.post(
        "/excel-generator/generate",
        response_model=GenerateResponse,
        tags=["Excel Generator"],
        responses={
            400: {"model": ServiceResponse, "description": "Missing sheetsData"},
            500: {"model": ServiceResponse, "description": "Generation failed"},
        },
    )
    async def generate_excel(
        request: Request, body: GenerateRequest
    ) -> GenerateResponse:
        """Render sheet and table definitions into a downloadable workbook.

        Each sheet becomes a worksheet; each table is placed at its start
        cell with an optional merged title, header row and typed body cells.
        The returned URL stays valid until the retention sweep removes the
        file.

        Raises:
            ValidationError: 400 if sheetsData is missing or empty.
            GenerationError: 500 if the workbook cannot be produced.
        """
        if not body.sheets_data:
            logger.warning("Generate request missing sheetsData")
            raise ValidationError(
                message="sheetsData is required and must be a non-empty array",
                field="sheetsData",
                error_code=ErrorCode.MISSING_FIELD,
            )

        config = ExcelConfig.from_overrides(body.excel_configs)
        builder: WorkbookBuilder = request.app.state.workbook_builder
        try:
            file_name = await builder.build(body.sheets_data, config)
        except ToolboxError:
            raise
        except Exception as e:
            raise GenerationError(message=f"Error generating Excel file: {e}") from e

        url = download_url(settings.base_url, file_name)
        return GenerateResponse(
            success=True,
            message="Excel file generated successfully",
            response_object=DownloadLink(download_url=url),
            status_code=status.HTTP_200_OK,
        )

    @app.get(
        "/web-page-reader/get-content",
        response_model=WebPageContentResponse,
        tags=["Web Page Reader"],
        responses={
            400: {"model": ServiceResponse, "description": "Missing url"},
            500: {"model": ServiceResponse, "description": "Fetch or parse failed"},
        },
    )
    async def get_web_page_content(
        request: Request,
        url: Annotated[
            str | None, Query(description="URL of the page to read")
        ] = None,
    ) -> WebPageContentResponse:
        """Fetch a web page and return its title and main readable text.

        Raises:
            ValidationError: 400 if url is missing.
            FetchError: 500 if the page cannot be fetched.
            ParseError: 500 if the page cannot be parsed.
        """
        if url is None or not url.strip():
            raise ValidationError(message="URL must be a string", field="url")

        reader: WebPageReader = request.app.state.web_page_reader
        content = await reader.extract(url.strip())
        return WebPageContentResponse(
            success=True,
            message="Content fetched successfully",
            response_object=content,
            status_code=status.HTTP_200_OK,
        )

    app.mount(
        DOWNLOADS_PATH,
        StaticFiles(directory=exports_path),
        name="excel-downloads",
    )

    logger.info("FastAPI application created successfully")
    return app


# Create the application instance
app = create_app()
