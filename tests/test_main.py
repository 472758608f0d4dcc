from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from src.gatekeeper.catalog import CatalogStore
from src.gatekeeper.main import create_app
from src.gatekeeper.models import Base
from src.gatekeeper.storage import CapabilityIssuer


def test_lifespan_builds_handles_from_env(tmp_path, monkeypatch) -> None:
    db_path = (tmp_path / "startup.db").as_posix()
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    engine.dispose()

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")
    monkeypatch.delenv("R2_ENDPOINT", raising=False)
    monkeypatch.setenv("R2_ACCOUNT_ID", "acct123")
    monkeypatch.setenv("R2_BUCKET_NAME", "music-private")
    monkeypatch.setenv("R2_ACCESS_KEY_ID", "ak")
    monkeypatch.setenv("R2_SECRET_ACCESS_KEY", "sk")
    monkeypatch.setenv("STREAM_URL_TTL_SECONDS", "120")

    app = create_app()
    with TestClient(app) as client:
        assert isinstance(app.state.catalog, CatalogStore)
        assert isinstance(app.state.issuer, CapabilityIssuer)
        assert app.state.issuer.bucket == "music-private"
        assert app.state.stream_ttl_seconds == 120
        assert client.get("/api/songs").json() == []


def test_cors_origins_from_env(monkeypatch, catalog, issuer) -> None:
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://player.example, https://admin.example")

    with TestClient(create_app(catalog=catalog, issuer=issuer)) as client:
        allowed = client.get("/api/songs", headers={"Origin": "https://player.example"})
        denied = client.get("/api/songs", headers={"Origin": "https://evil.example"})

    assert allowed.headers["access-control-allow-origin"] == "https://player.example"
    assert "access-control-allow-origin" not in denied.headers


class _RecordingEngine:
    def __init__(self) -> None:
        self.disposed = False

    def dispose(self) -> None:
        self.disposed = True


def test_engine_released_when_issuer_config_missing(monkeypatch) -> None:
    engine = _RecordingEngine()
    monkeypatch.setattr("src.gatekeeper.main.create_catalog_engine", lambda: engine)
    for name in ("R2_ENDPOINT", "R2_ACCOUNT_ID", "R2_BUCKET_NAME", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY"):
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(RuntimeError, match="R2_BUCKET_NAME"):
        with TestClient(create_app()):
            pass

    assert engine.disposed


@pytest.mark.parametrize("ttl", [0, -5, 7 * 24 * 60 * 60 + 1])
def test_supplied_ttl_out_of_range_rejected(catalog, issuer, ttl: int) -> None:
    with pytest.raises(ValueError):
        create_app(catalog=catalog, issuer=issuer, stream_ttl_seconds=ttl)


def test_supplied_ttl_is_used(catalog, issuer) -> None:
    assert create_app(catalog=catalog, issuer=issuer, stream_ttl_seconds=1).state.stream_ttl_seconds == 1
