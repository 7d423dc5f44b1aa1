"""Tests for DB helpers and settings parsing."""

import pytest

from core import db, settings


class FailingPool:
    async def fetch(self, sql, *args):
        raise OSError("connection refused")

    async def fetchrow(self, sql, *args):
        raise OSError("connection refused")

    async def execute(self, sql, *args):
        raise OSError("connection refused")


def test_sanitize_database_url_strips_sslmode():
    url = "postgresql://u:p@db.example.org:5432/postgres?sslmode=require&application_name=api"
    assert db._sanitize_database_url(url) == "postgresql://u:p@db.example.org:5432/postgres?application_name=api"


def test_database_url_required(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(db.StoreError, match="DATABASE_URL"):
        db.database_url()


def test_pool_not_initialized(monkeypatch):
    monkeypatch.setattr(db, "_pool", None)
    with pytest.raises(db.StoreError, match="not initialized"):
        db.pool()


@pytest.mark.parametrize("call", [db.fetch_all, db.fetch_one, db.execute])
async def test_driver_errors_become_store_errors(monkeypatch, call):
    monkeypatch.setattr(db, "_pool", FailingPool())
    with pytest.raises(db.StoreError):
        await call("SELECT 1")


def test_json_arg():
    assert db.json_arg(None) is None
    assert db.json_arg({"a": [1]}) == '{"a": [1]}'


def test_settings_parsing(monkeypatch):
    monkeypatch.setenv("SOME_INT", "x")
    monkeypatch.setenv("SOME_LIST", "http://a, http://b,,")
    monkeypatch.setenv("SOME_JSON", "[1, 2]")

    assert settings.env_int("SOME_INT", 5) == 5
    assert settings.env_list("SOME_LIST", ["*"]) == ["http://a", "http://b"]
    assert settings.env_json_dict("SOME_JSON", {"k": "v"}) == {"k": "v"}
    assert settings.env_float("MISSING_FLOAT", 1.5) == 1.5
