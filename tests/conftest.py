from __future__ import annotations

import os
from typing import Callable, Iterator, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault("STREAM_URL_TTL_SECONDS", "300")

from src.gatekeeper.catalog import CatalogStore
from src.gatekeeper.errors import IssuerUnavailable
from src.gatekeeper.main import create_app
from src.gatekeeper.models import Album, Base, Song


class FakeIssuer:
    """Records every signing request and hands back a distinct opaque URL."""

    def __init__(self, fail: bool = False, error: Optional[Exception] = None) -> None:
        self.calls: List[Tuple[str, int]] = []
        self.fail = fail
        self.error = error

    def issue_capability(self, storage_key: str, ttl_seconds: int) -> str:
        self.calls.append((storage_key, ttl_seconds))
        if self.error is not None:
            raise self.error
        if self.fail:
            raise IssuerUnavailable("InvalidAccessKeyId for key " + storage_key)
        return f"https://signed.example/cap-{len(self.calls)}?expires={ttl_seconds}"


@pytest.fixture()
def session_factory(tmp_path) -> Iterator[sessionmaker]:
    engine = create_engine(
        f"sqlite:///{(tmp_path / 'catalog-test.db').as_posix()}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


def seed_scenario(session_factory: sessionmaker) -> None:
    """Album 1 with song 10; song 11 without an album."""
    with session_factory() as session:
        session.add(Album(id=1, title="A", cover_art_url="https://cdn.example/a.jpg"))
        session.add(
            Song(
                id=10,
                title="S1",
                artist="Artist One",
                cover_art_url="https://cdn.example/s1.jpg",
                album_id=1,
                audio_file_name="private/s1-master.mp3",
            )
        )
        session.add(
            Song(
                id=11,
                title="S2",
                artist="Artist Two",
                cover_art_url=None,
                album_id=None,
                audio_file_name="private/s2-master.mp3",
            )
        )
        session.commit()


@pytest.fixture()
def seeded(session_factory: sessionmaker) -> sessionmaker:
    seed_scenario(session_factory)
    return session_factory


@pytest.fixture()
def catalog(seeded: sessionmaker) -> CatalogStore:
    return CatalogStore(seeded)


@pytest.fixture()
def issuer() -> FakeIssuer:
    return FakeIssuer()


@pytest.fixture()
def failing_issuer() -> FakeIssuer:
    return FakeIssuer(fail=True)


@pytest.fixture()
def rejecting_issuer() -> FakeIssuer:
    return FakeIssuer(error=ValueError("storage_key is empty"))


@pytest.fixture()
def make_client() -> Callable[..., TestClient]:
    """Return a helper that wires substitute handles into a fresh app."""

    def _factory(catalog, issuer, ttl: Optional[int] = None) -> TestClient:
        return TestClient(create_app(catalog=catalog, issuer=issuer, stream_ttl_seconds=ttl))

    return _factory


@pytest.fixture()
def client(catalog: CatalogStore, issuer: FakeIssuer, make_client) -> Iterator[TestClient]:
    with make_client(catalog, issuer) as test_client:
        yield test_client
