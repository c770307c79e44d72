from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI

from app.core import lifespan as lifespan_module
from app.core.lifespan import lifespan, verify_database_connection


@pytest.mark.asyncio
async def test_verify_database_connection_success() -> None:
    """Test that database connection verification succeeds when DB is available."""
    with patch("app.core.lifespan.get_engine") as mock_get_engine:
        mock_conn = AsyncMock()
        mock_execute = AsyncMock()
        mock_conn.__aenter__ = AsyncMock(return_value=mock_conn)
        mock_conn.__aexit__ = AsyncMock(return_value=None)
        mock_conn.execute = mock_execute
        mock_engine = MagicMock()
        mock_engine.connect.return_value = mock_conn
        mock_get_engine.return_value = mock_engine

        await verify_database_connection()

        mock_engine.connect.assert_called_once()
        mock_execute.assert_called_once()


@pytest.mark.asyncio
async def test_verify_database_connection_failure() -> None:
    """Test that database connection verification raises on failure."""
    with patch("app.core.lifespan.get_engine") as mock_get_engine:
        mock_get_engine.return_value.connect.side_effect = Exception("Connection failed")
        with pytest.raises(RuntimeError, match="Failed to connect to database"):
            await verify_database_connection()


@pytest.mark.asyncio
async def test_lifespan_skips_db_check_in_test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that lifespan skips database verification in test environment."""
    monkeypatch.setattr(lifespan_module.settings, "environment", "test")
    with (
        patch("app.core.lifespan.verify_database_connection") as mock_verify,
        patch("app.core.lifespan.dispose_engine", new_callable=AsyncMock),
    ):
        async with lifespan(FastAPI()):
            pass

        mock_verify.assert_not_called()


@pytest.mark.asyncio
async def test_lifespan_verifies_db_and_creates_photo_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Test that lifespan verifies the database and prepares photo storage outside tests."""
    photo_dir = tmp_path / "photos"
    monkeypatch.setattr(lifespan_module.settings, "environment", "local")
    monkeypatch.setattr(lifespan_module.settings, "photo_storage_dir", photo_dir)
    with (
        patch(
            "app.core.lifespan.verify_database_connection", new_callable=AsyncMock
        ) as mock_verify,
        patch("app.core.lifespan.dispose_engine", new_callable=AsyncMock),
    ):
        async with lifespan(FastAPI()):
            pass

        mock_verify.assert_awaited_once()
    assert photo_dir.is_dir()


@pytest.mark.asyncio
async def test_lifespan_disposes_engine_even_if_startup_fails(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test that engine is disposed even if startup verification fails."""
    monkeypatch.setattr(lifespan_module.settings, "environment", "local")
    with (
        patch("app.core.lifespan.dispose_engine", new_callable=AsyncMock) as mock_dispose,
        patch(
            "app.core.lifespan.verify_database_connection",
            side_effect=RuntimeError("DB failed"),
        ),
    ):
        with pytest.raises(RuntimeError):
            async with lifespan(FastAPI()):
                pass

        mock_dispose.assert_awaited_once()
