"""Repository lifespan: startup and shutdown of the record store's resources.

Single place for wiring (SRP): SQL engine and session factory, Redis cache,
request gate, telemetry. No business logic here. Callers (service layer,
workers) enter the context once per process and share the yielded
repository across requests.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from recordstore.core.config import Settings, get_settings
from recordstore.infrastructure.cache.record_cache import RecordCache
from recordstore.infrastructure.cache.redis_cache import CacheService
from recordstore.infrastructure.cache.request_gate import RequestGate
from recordstore.infrastructure.persistence import database
from recordstore.infrastructure.persistence.repositories.record_repo import (
    RecordRepository,
)
from recordstore.infrastructure.persistence.repositories.record_store import (
    RecordStore,
)
from recordstore.shared.telemetry.logging import setup_logging
from recordstore.shared.telemetry.telemetry import (
    TelemetryConfig,
    set_telemetry,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def record_repository_lifespan(
    settings: Settings | None = None,
) -> AsyncIterator[RecordRepository]:
    """Build the repository, yield it, then release its resources.

    Startup order: logging, telemetry (if enabled), SQL engine (and tables when
    database_create_all), Redis cache (if enabled). Shutdown order: cache
    disconnect, telemetry shutdown, SQL engine dispose. Shutdown also runs
    when startup fails part way, for whatever was already set up.
    """
    settings = settings or get_settings()
    cache_service: CacheService | None = None
    telemetry_instance: TelemetryConfig | None = None

    try:
        # ---- Startup ----
        setup_logging(settings)
        if settings.telemetry_enabled:
            telemetry = TelemetryConfig(
                service_name=settings.app_name,
                service_version=settings.app_version,
                enabled=True,
                environment=settings.telemetry_environment,
            )
            set_telemetry(telemetry)
            telemetry_instance = telemetry
            telemetry.setup_telemetry(
                exporter_type=settings.telemetry_exporter,
                otlp_endpoint=settings.telemetry_otlp_endpoint,
                sample_rate=settings.telemetry_sample_rate,
            )
            telemetry.instrument_logging()
            logger.info("Telemetry initialized")

        session_factory = database.get_session_factory(settings)
        if telemetry_instance is not None:
            telemetry_instance.instrument_sqlalchemy(database.get_engine(settings))
        if settings.database_create_all:
            await database.create_all()

        record_cache: RecordCache | None = None
        if settings.redis_enabled:
            if telemetry_instance is not None:
                telemetry_instance.instrument_redis()
            cache_service = CacheService(settings=settings)
            await cache_service.connect()
            record_cache = RecordCache(
                cache_service,
                ttl=settings.cache_ttl_records,
                not_found_ttl=settings.cache_ttl_not_found,
            )

        yield RecordRepository(
            RecordStore(session_factory),
            cache=record_cache,
            gate=RequestGate(timeout=settings.request_gate_timeout_seconds),
        )
    finally:
        # ---- Shutdown ----
        if cache_service is not None:
            await cache_service.disconnect()
            logger.info("Cache disconnected")

        if telemetry_instance is not None:
            telemetry_instance.shutdown()
            set_telemetry(None)

        await database.dispose_engine()
