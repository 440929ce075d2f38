"""
Koalab Backend: Startup and Health Tests
=========================================

What we test:
    ✅ A first start creates the secret file and the tables
    ✅ An unusable secret file location aborts startup
    ✅ An unreachable store aborts startup
    ✅ /health reports 503 when the store goes away
"""

import dataclasses

import pytest
from sqlalchemy import inspect

from koalab.database import build_engine
from koalab.exceptions import StartupError
from koalab.main import create_app


class TestLifespan:

    @pytest.mark.asyncio
    async def test_first_start_creates_secret_and_tables(self, tmp_path, test_settings):
        app = create_app(test_settings)

        async with app.router.lifespan_context(app):
            engine = app.state.context.engine
            async with engine.connect() as conn:
                tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

        assert (tmp_path / ".secret").exists()
        assert {"boards", "lines", "postits"} <= set(tables)

    @pytest.mark.asyncio
    async def test_unwritable_secret_aborts(self, tmp_path, test_settings):
        settings = test_settings.model_copy(
            update={"secret_file": str(tmp_path / "missing" / ".secret")}
        )
        app = create_app(settings)

        with pytest.raises(StartupError):
            async with app.router.lifespan_context(app):
                pass

    @pytest.mark.asyncio
    async def test_unreachable_store_aborts(self, tmp_path, test_settings):
        settings = test_settings.model_copy(
            update={"database_url": f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}"}
        )
        app = create_app(settings)

        with pytest.raises(StartupError, match="Can't connect"):
            async with app.router.lifespan_context(app):
                pass


class TestHealthUnhealthy:

    @pytest.mark.asyncio
    async def test_store_unreachable_is_503(self, app, client, tmp_path, test_settings):
        broken = build_engine(
            test_settings.model_copy(
                update={"database_url": f"sqlite+aiosqlite:///{tmp_path / 'nope' / 'db.sqlite'}"}
            )
        )
        healthy_context = app.state.context
        app.state.context = dataclasses.replace(healthy_context, engine=broken)
        try:
            response = await client.get("/health")
        finally:
            app.state.context = healthy_context
            await broken.dispose()

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "disconnected"
