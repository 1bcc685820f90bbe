"""World Radio service main application."""
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from .api.health import router as health_router
from .api.player import router as player_router
from .api.relay import router as relay_router
from .config import Settings, app_settings
from .exceptions import register_exception_handlers
from .logging import configure_logging, get_logger
from .metrics import METRICS_CONTENT_TYPE, get_metrics
from .models import Station
from .services.audio import AudioSink, StreamProbeSink
from .services.directory_client import StationDirectoryClient
from .services.player import RadioPlayer

logger = get_logger(__name__)


def log_playback_notice(message: str, station: Station) -> None:
    """Record the user-facing notice for a stream that failed to start."""
    logger.warning("playback_notice", message=message, station_id=station.id, station_name=station.name)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sink: Optional[AudioSink] = None,
    load_on_startup: bool = True,
) -> FastAPI:
    """Create the FastAPI app.

    Args:
        settings: Settings to use, defaults to ``app_settings``
        transport: httpx transport for all outbound requests (tests use a mock transport)
        sink: Audio sink for the player, defaults to a StreamProbeSink
        load_on_startup: Fetch the station list when the app starts
    """
    settings = settings or app_settings
    configure_logging(log_level=settings.log_level, log_format=settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager with graceful shutdown."""
        logger.info("worldradio_starting", version=settings.app_version, upstream=settings.upstream_base_url)

        http_client = httpx.AsyncClient(
            timeout=settings.upstream_timeout_seconds,
            headers={"User-Agent": settings.user_agent},
            follow_redirects=True,
            transport=transport,
        )
        directory = StationDirectoryClient(settings.upstream_base_url, client=http_client)
        player = RadioPlayer(
            directory,
            sink or StreamProbeSink(http_client, timeout=settings.stream_probe_timeout_seconds),
            notifier=log_playback_notice,
            top_station_limit=settings.top_station_limit,
            country_limit=settings.country_limit,
            country_source=settings.country_source,
            default_volume=settings.default_volume,
        )

        app.state.settings = settings
        app.state.http_client = http_client
        app.state.player = player

        if load_on_startup:
            await player.load()
        else:
            player.loading = False

        logger.info("worldradio_started", stations=len(player.all_stations))

        yield

        logger.info("worldradio_shutting_down")
        await player.aclose()
        await directory.aclose()
        await http_client.aclose()
        logger.info("worldradio_shutdown")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Internet radio player backed by the radio-browser directory",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(relay_router, prefix=settings.api_prefix)
    app.include_router(player_router, prefix=settings.api_prefix)

    @app.get("/metrics")
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(content=get_metrics(), media_type=METRICS_CONTENT_TYPE)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8004)
