"""FastAPI application factory for Zyra."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from zyra.common.config import get_settings
from zyra.common.exceptions import ZyraError
from zyra.common.logging import get_logger, setup_logging
from zyra.common.schemas import ErrorResponse, HealthResponse

logger = get_logger("app")


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"{loc}: {first.get('msg', 'invalid value')}" if loc else first.get("msg", "Invalid request")


def create_app() -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        setup_logging(settings.log_level)
        from zyra.deps import get_billing_service, get_store
        store = get_store()
        await store.open()
        await get_billing_service().seed_plans()
        logger.info("Zyra started", extra={"operation": f"storage:{store.backend}"})
        yield
        # Shutdown
        await store.close()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ZyraError)
    async def zyra_error_handler(request: Request, exc: ZyraError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(message=exc.message, code=exc.code).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(message=_validation_message(exc), code="VALIDATION_ERROR").model_dump(),
        )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        from zyra.deps import get_store
        return HealthResponse(version=settings.api_version, storage=get_store().backend)

    # Mount routers
    from zyra.auth.router import router as auth_router
    from zyra.ai.router import router as ai_router
    from zyra.products.router import router as products_router
    from zyra.campaigns.router import router as campaigns_router
    from zyra.usage.router import router as usage_router
    from zyra.notifications.router import router as notifications_router
    from zyra.billing.router import router as billing_router

    prefix = settings.api_prefix
    app.include_router(auth_router, prefix=prefix, tags=["auth"])
    app.include_router(ai_router, prefix=prefix, tags=["ai"])
    app.include_router(products_router, prefix=prefix, tags=["products"])
    app.include_router(campaigns_router, prefix=prefix, tags=["campaigns"])
    app.include_router(usage_router, prefix=prefix, tags=["dashboard"])
    app.include_router(notifications_router, prefix=prefix, tags=["notifications"])
    app.include_router(billing_router, prefix=prefix, tags=["billing"])

    return app
