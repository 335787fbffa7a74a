"""Tests for the fieldops CLI against a file-backed SQLite database."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone

import pytest
import structlog
from typer.testing import CliRunner

from fieldops.cli import app
from fieldops.config import reset_config
from fieldops.db.connection import close_db, get_session
from fieldops.db.models import BuildingModel, VisitModel, VisitTemplateModel

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers = root.handlers[:]
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers


@pytest.fixture
def database(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'fieldops.db'}")
    reset_config()
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output
    return tmp_path


def seed_building() -> str:
    async def _seed():
        async with get_session() as session:
            building = BuildingModel(name="Tower A")
            template = VisitTemplateModel(name="Bombas")
            session.add_all([building, template])
            await session.flush()
            session.add(
                VisitModel(
                    building_id=building.id,
                    template_id=template.id,
                    status="completed",
                    scheduled_for=date(2024, 6, 1),
                    completed_at=datetime(2024, 6, 1, 14, 30, tzinfo=timezone.utc),
                )
            )
            building_id = str(building.id)
        await close_db()
        return building_id

    return asyncio.run(_seed())


def test_report_writes_pdf(database):
    building_id = seed_building()
    out = database / "report.pdf"

    result = runner.invoke(app, ["report", building_id, "2024-06-01", "--out", str(out)])

    assert result.exit_code == 0, result.output
    assert "Bombas" in result.output
    assert "draft" in result.output
    assert out.read_bytes().startswith(b"%PDF")


def test_report_unknown_building(database):
    result = runner.invoke(
        app, ["report", "00000000-0000-0000-0000-000000000000", "2024-06-01", "--out", str(database / "x.pdf")]
    )

    assert result.exit_code == 1
    assert "NotFoundError" in result.output
    assert not (database / "x.pdf").exists()


def test_report_invalid_date(database):
    result = runner.invoke(app, ["report", "b", "2024-02-30"])

    assert result.exit_code == 1
    assert "InvalidInputError" in result.output
