import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cartapi.core import jsonerror
from cartapi.core.config import settings
from cartapi.core.monitoring import ERROR_500_COUNTER, MetricsCollector
from cartapi.db.session import create_db_and_tables
from cartapi.routers import carts
from cartapi.services.auth import AuthClient

logger = logging.getLogger(__name__)

_HTTP_ERRORS = {
    400: jsonerror.bad_request,
    401: jsonerror.unauthorised,
    404: jsonerror.not_found,
    422: jsonerror.invalid_params,
    500: jsonerror.internal_error,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("%s started", settings.PROJECT_NAME)
    yield
    logger.info("%s shutting down", settings.PROJECT_NAME)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    writer = _HTTP_ERRORS.get(exc.status_code)
    if writer is None:
        body = jsonerror.ErrorResponse(error=jsonerror.new_error(jsonerror.ERR_UNKNOWN, str(exc.detail)))
        return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=exc.headers)
    response = writer(str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        return jsonerror.bad_request("body has invalid json format")

    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ())]
    if len(loc) == 2 and loc[0] == "path":
        return jsonerror.invalid_params(f"{loc[1]} param is not a valid number")
    field = ".".join(loc[1:]) or "request"
    return jsonerror.invalid_params(f"{field}: {first.get('msg', 'invalid value')}")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    # Label with the route template so ids in the path share one series
    route = request.scope.get("route")
    request.app.state.metrics.increment(
        ERROR_500_COUNTER, labels={"method": getattr(route, "path", "unhandled"), "reason": "unhandled"}
    )
    return jsonerror.internal_error("")


def create_app(metrics: MetricsCollector = None, auth_client: AuthClient = None) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        lifespan=lifespan,
        description="Shopping cart API",
    )
    app.state.metrics = metrics or MetricsCollector()
    app.state.auth_client = auth_client or AuthClient()

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/")
    def read_root():
        return {"message": f"Welcome to {settings.PROJECT_NAME}. Visit /docs for Swagger UI."}

    @app.get("/health", response_class=PlainTextResponse)
    def health():
        return "ok"

    @app.get("/metrics", response_class=PlainTextResponse)
    def prometheus_metrics(request: Request):
        return PlainTextResponse(
            request.app.state.metrics.render_prometheus(),
            media_type="text/plain; version=0.0.4",
        )

    app.include_router(carts.router, prefix=settings.API_PREFIX, tags=["cart"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()
