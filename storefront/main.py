import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import settings
from storefront.container import Container, build_container
from storefront.presentation.api import router
from storefront.presentation.errors import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""
    created_here = False
    if getattr(app.state, "container", None) is None:
        app.state.container = build_container(settings)
        created_here = True
        logger.info(f"Сервисы созданы, окружение: {settings.ENVIRONMENT}")

    yield

    logger.info("Приложение останавливается...")
    engine = app.state.container.engine
    if created_here and engine is not None:
        await engine.dispose()


def create_app(container: Optional[Container] = None) -> FastAPI:
    app = FastAPI(
        title="Storefront API",
        description="Каталог, заказы и оплата через Midtrans",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(router, prefix="/api/v1")

    @app.get("/health")
    async def health():
        return {
            "success": True,
            "message": "Server is running",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=settings.PORT)
