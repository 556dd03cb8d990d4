"""Main FastAPI application entry point."""

import os
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import health, formats, sessions
from .providers import (
    ImageGenerationBackend,
    ImageDescriptionBackend,
    OpenRouterClient,
    WaveSpeedAIClient,
)
from .core import (
    CompositeBuilder,
    ImageGenerator,
    BatchCoordinator,
    EditCoordinator,
    ImageAnalyzer,
    SessionStore,
    OutpaintWorkflow,
)
from .utils.config import Config, load_config
from .utils.logger import get_logger

logger = get_logger(__name__)


def build_workflow(
    config: Config,
    generation_backend: ImageGenerationBackend,
    description_backend: Optional[ImageDescriptionBackend] = None,
) -> OutpaintWorkflow:
    """Wire the core components around the given remote capabilities."""
    generator = ImageGenerator(backend=generation_backend)

    batch = BatchCoordinator(
        composite_builder=CompositeBuilder(),
        generator=generator,
        base_prompt=config.prompts.outpainting_base,
    )

    editor = EditCoordinator(
        generator=generator,
        edit_prefix=config.prompts.edit_prefix,
    )

    analyzer = None
    if config.analysis_enabled and description_backend is not None:
        analyzer = ImageAnalyzer(
            backend=description_backend,
            prompt=config.prompts.analysis,
        )

    return OutpaintWorkflow(
        store=SessionStore(ttl_seconds=config.session_ttl_seconds),
        batch=batch,
        editor=editor,
        analyzer=analyzer,
        max_upload_bytes=config.max_upload_bytes,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown.

    Initializes provider clients and core components on startup,
    closes the clients on shutdown.
    """
    logger.info("Application starting up...")

    try:
        config = load_config()

        wavespeed = WaveSpeedAIClient(
            api_key=config.wavespeed_api_key,
            model_id=config.generation_model,
            timeout=config.timeout_wavespeed_seconds,
            max_wait=config.timeout_wavespeed_polling_seconds,
        )
        await wavespeed.initialize()

        openrouter = OpenRouterClient(
            api_key=config.openrouter_api_key,
            model=config.vision_model,
            timeout=config.timeout_openrouter_seconds,
        )
        await openrouter.initialize()

        logger.info("Provider clients initialized")

        app.state.config = config
        app.state.wavespeed = wavespeed
        app.state.openrouter = openrouter
        app.state.workflow = build_workflow(config, wavespeed, openrouter)

        logger.info("Application startup complete")

    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    logger.info("Application shutting down...")

    await wavespeed.close()
    await openrouter.close()

    logger.info("Application shutdown complete")


app = FastAPI(
    title="Outpaint Studio",
    description="Multi-format outpainting and masked editing of photos",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(formats.router, prefix="/formats", tags=["formats"])
app.include_router(sessions.router, prefix="/sessions", tags=["sessions"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "outpaint-studio",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))

    uvicorn.run(
        "outpaint_studio.main:app",
        host="0.0.0.0",
        port=port,
        reload=True,
        log_level="info",
    )
