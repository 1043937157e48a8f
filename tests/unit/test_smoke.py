"""Smoke tests: interpreter, installed stack and package metadata."""

import sys

import pytest


class TestRuntime:
    def test_python_311_or_higher(self) -> None:
        # asyncio.TaskGroup and the X | None annotations need 3.11.
        assert sys.version_info >= (3, 11)

    def test_pydantic_v2(self) -> None:
        import pydantic

        assert int(pydantic.VERSION.split(".")[0]) >= 2

    def test_api_stack_importable(self) -> None:
        import fastapi
        import starlette
        import uvicorn

        assert fastapi.FastAPI and starlette.__version__ and uvicorn.run


class TestPackage:
    """The package imports cleanly and exposes its version."""

    def test_version_matches_fixture(self, project_version: str) -> None:
        from src import __version__

        assert __version__ == project_version
        assert len(__version__.split(".")) >= 2

    def test_app_mounts_governance_routes(self) -> None:
        from src.api.main import app

        paths = {route.path for route in app.routes}

        assert "/v1/health" in paths
        assert "/v1/meetings" in paths
        assert "/v1/resolutions/{resolution_id}" in paths


class TestAsync:
    @pytest.mark.asyncio
    async def test_taskgroup_runs_tasks(self) -> None:
        import asyncio

        seen: list[str] = []

        async def record(name: str) -> None:
            await asyncio.sleep(0)
            seen.append(name)

        async with asyncio.TaskGroup() as tg:
            tg.create_task(record("ballot"))
            tg.create_task(record("sweep"))

        assert sorted(seen) == ["ballot", "sweep"]
