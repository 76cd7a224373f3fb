"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from fitness_companion.api.chat import router as chat_router
from fitness_companion.api.nutrition import router as nutrition_router
from fitness_companion.api.profile import router as profile_router
from fitness_companion.api.progress import router as progress_router
from fitness_companion.api.schemas import WidgetSyncIn
from fitness_companion.app_logging import configure_logging
from fitness_companion.containers import AppContainer
from fitness_companion.services.ai_gateway import GatewayError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(chat_router)
    app.include_router(nutrition_router)
    app.include_router(profile_router)
    app.include_router(progress_router)

    @app.exception_handler(GatewayError)
    async def gateway_error(_request: Request, exc: GatewayError) -> JSONResponse:
        logger.warning("AI gateway error: %s (status=%s)", exc, exc.status_code)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc), "provider_status": exc.status_code},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/widget/sync")
    async def widget_sync(payload: WidgetSyncIn, request: Request) -> dict[str, object]:
        """Push today's targets and intake to the widget."""
        state_container: AppContainer = request.app.state.container
        day = payload.date or datetime.now(tz=UTC)
        synced = await state_container.widget_sync.sync(day)
        return {
            "synced": synced,
            "target": state_container.widget_sync.target(),
            "consumed": state_container.widget_sync.consumed(day),
        }

    return app
