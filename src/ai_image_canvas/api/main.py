import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ai_image_canvas import __version__
from ai_image_canvas.api.chat import router as chat_router
from ai_image_canvas.core.config import CanvasSettings, get_settings
from ai_image_canvas.providers import load_config_from_settings

logger = logging.getLogger(__name__)


def create_app(settings: CanvasSettings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings
        app.state.providers = load_config_from_settings(settings)
        logger.info("Canvas API ready (debug=%s)", settings.debug)
        yield

    app = FastAPI(title="AI Image Canvas", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.include_router(chat_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
