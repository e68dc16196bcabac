"""record_repository_lifespan wiring and cleanup over SQLite."""

import pytest

from recordstore.application.dtos.record import RecordCreate
from recordstore.core.config import Settings
from recordstore.core.lifespan import record_repository_lifespan
from recordstore.domain.exceptions import StoreFailureException
from recordstore.infrastructure.cache.redis_cache import CacheService
from recordstore.infrastructure.persistence import database
from recordstore.shared.telemetry.telemetry import TelemetryConfig, get_telemetry


def _settings(tmp_path, **overrides) -> Settings:
    values = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'lifespan.db'}",
        "database_create_all": True,
        "redis_enabled": False,
        "telemetry_enabled": False,
        "request_gate_timeout_seconds": 5.0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


async def test_lifespan_yields_working_repository(tmp_path) -> None:
    async with record_repository_lifespan(_settings(tmp_path)) as repo:
        assert repo.cache is None
        new_id = await repo.create_record(
            RecordCreate(username="amy", email="a@x.com", password_hash="h1")
        )
        record = await repo.get_record(new_id)
        assert record.username == "amy"

    assert database.engine is None
    assert database.AsyncSessionLocal is None


async def test_data_survives_restart(tmp_path) -> None:
    async with record_repository_lifespan(_settings(tmp_path)) as repo:
        new_id = await repo.create_record(
            RecordCreate(username="amy", email="a@x.com", password_hash="h1")
        )
    async with record_repository_lifespan(_settings(tmp_path)) as repo:
        assert (await repo.get_record(new_id)).email == "a@x.com"


async def test_failed_table_creation_disposes_engine(tmp_path, monkeypatch) -> None:
    async def fail_create_all() -> None:
        raise StoreFailureException("create_all", "disk full")

    monkeypatch.setattr(database, "create_all", fail_create_all)
    with pytest.raises(StoreFailureException):
        async with record_repository_lifespan(_settings(tmp_path)):
            pytest.fail("startup should not complete")

    assert database.engine is None
    assert database.AsyncSessionLocal is None


async def test_failed_cache_setup_cleans_up(tmp_path, monkeypatch) -> None:
    async def fail_connect(self) -> None:
        raise RuntimeError("redis misconfigured")

    monkeypatch.setattr(CacheService, "connect", fail_connect)
    with pytest.raises(RuntimeError, match="redis misconfigured"):
        async with record_repository_lifespan(_settings(tmp_path, redis_enabled=True)):
            pytest.fail("startup should not complete")

    assert database.engine is None


async def test_failed_telemetry_setup_clears_global(tmp_path, monkeypatch) -> None:
    def fail_setup(self, **kwargs) -> None:
        raise RuntimeError("bad exporter")

    monkeypatch.setattr(TelemetryConfig, "setup_telemetry", fail_setup)
    with pytest.raises(RuntimeError, match="bad exporter"):
        async with record_repository_lifespan(_settings(tmp_path, telemetry_enabled=True)):
            pytest.fail("startup should not complete")

    assert get_telemetry() is None
    assert database.engine is None
