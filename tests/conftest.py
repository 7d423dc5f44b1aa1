"""
Shared pytest fixtures.

The app is exercised without its lifespan (no DB pool); tests patch the
repository functions or override the store dependencies instead.
"""

import pytest
from fastapi.testclient import TestClient

from main import app


@pytest.fixture
def client():
    """TestClient that does not run startup/shutdown."""
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def patch_async(monkeypatch):
    """Replace `module.name` with an async function returning `result` (or raising it)."""

    def _patch(module, name, result=None, calls=None):
        async def _fake(*args, **kwargs):
            if calls is not None:
                calls.append((args, kwargs))
            if isinstance(result, Exception):
                raise result
            return result

        monkeypatch.setattr(module, name, _fake)

    return _patch
