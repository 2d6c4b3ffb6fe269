"""Shared pytest fixtures for httpext tests.

Service tests talk to the FastAPI app in-process through httpx's
ASGITransport, so no server is started.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from httpext.config import CORSConfig, HttpExtConfig, ResourcesConfig, ServerConfig
from httpext.server import create_app


@pytest.fixture
def config() -> HttpExtConfig:
    """A small collection with CORS restricted to two origins."""
    return HttpExtConfig(
        server=ServerConfig(host="127.0.0.1", port=8081),
        cors=CORSConfig(
            allow_origins=["http://example.com", "http://google.com"],
            allow_methods=["GET", "OPTIONS"],
            allow_headers=["Range"],
            expose_headers=["Content-Range"],
            max_age=60,
        ),
        resources=ResourcesConfig(units="resources", count=300, max_page_size=100),
    )


@pytest.fixture
def app(config: HttpExtConfig):
    return create_app(config)


@pytest.fixture
async def client(app) -> AsyncClient:
    """Create an async test client for the httpext app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
