"""Pytest configuration and fixtures for fieldops tests.

Provides an in-memory database and a small factory for the building /
template / visit / response graph the reports are built from.
"""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fieldops.config import reset_config
from fieldops.db.models import (
    Base,
    BuildingModel,
    EquipmentModel,
    TemplateItemModel,
    VisitModel,
    VisitResponseModel,
    VisitTemplateModel,
)
from fieldops.models import VisitStatus


@pytest.fixture(autouse=True)
def app_env(monkeypatch):
    """Minimal environment for AppConfig; config cache reset around each test."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("ENVIRONMENT", "development")
    for name in (
        "REPORT_TIME_ZONE",
        "REPORT_LOCALE",
        "REPORT_LOGO_PATH",
        "REPORT_PAGE_MARGIN",
        "JSON_LOGS",
        "LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest_asyncio.fixture()
async def db_engine():
    """In-memory database shared by every session of one test."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory) -> AsyncSession:
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


class ReportFactory:
    """Builds persisted fixtures; every helper flushes so ids are usable."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _add(self, obj):
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def building(self, name: str = "Tower A") -> BuildingModel:
        return await self._add(BuildingModel(name=name))

    async def template(
        self, name: str, items: list[dict] | None = None
    ) -> tuple[VisitTemplateModel, list[TemplateItemModel]]:
        template = await self._add(VisitTemplateModel(name=name, category="pump"))
        created = []
        for index, fields in enumerate(items or []):
            created.append(
                await self._add(
                    TemplateItemModel(
                        template_id=template.id,
                        label=fields["label"],
                        item_type=fields.get("item_type", "checkbox"),
                        item_kind=fields.get("item_kind"),
                        required=fields.get("required", False),
                        sort_order=fields.get("sort_order", index),
                    )
                )
            )
        return template, created

    async def visit(
        self,
        building_id: UUID,
        template_id: UUID | None,
        completed_at: datetime | None,
        status: VisitStatus = VisitStatus.COMPLETED,
    ) -> VisitModel:
        scheduled = completed_at.date() if completed_at else date(2024, 6, 1)
        return await self._add(
            VisitModel(
                building_id=building_id,
                template_id=template_id,
                status=status.value,
                scheduled_for=scheduled,
                completed_at=completed_at,
            )
        )

    async def response(
        self,
        visit_id: UUID,
        item_id: UUID,
        created_at: datetime,
        equipment_id: UUID | None = None,
        **values,
    ) -> VisitResponseModel:
        return await self._add(
            VisitResponseModel(
                visit_id=visit_id,
                item_id=item_id,
                equipment_id=equipment_id,
                created_at=created_at,
                **values,
            )
        )

    async def equipment(self, building_id: UUID, **fields) -> EquipmentModel:
        fields.setdefault("name", "")
        return await self._add(EquipmentModel(building_id=building_id, **fields))


@pytest.fixture
def factory(db_session) -> ReportFactory:
    return ReportFactory(db_session)
