"""Service report aggregation.

Builds the tree building → sections (one per template) → visits → items →
latest value for every visit of a building completed during one civil day.
Each step returns ``(value, error)``; the first error ends the run and no
partial data is returned.
"""

from __future__ import annotations

import unicodedata
from collections import defaultdict
from collections.abc import Sequence
from datetime import date, datetime, timezone
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.config import get_config
from fieldops.dates import DayRange, parse_date, resolve_day_range
from fieldops.db.models import (
    BuildingModel,
    EquipmentModel,
    ServiceReportModel,
    TemplateItemModel,
    VisitModel,
    VisitResponseModel,
    VisitTemplateModel,
)
from fieldops.errors import DataLayerError, InvalidInputError, NotFoundError, ServiceReportError
from fieldops.models import ItemKind, ReportStatus, VisitStatus
from fieldops.reporting.i18n import labels_for
from fieldops.reporting.models import (
    ReportBuilding,
    ReportItem,
    ReportResponse,
    ReportSection,
    ReportVisit,
    ServiceReportData,
    ServiceReportRecord,
)
from fieldops.reporting.responses import latest_by_item

logger = structlog.get_logger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _collation_key(name: str) -> tuple[str, str]:
    """Case- and accent-insensitive sort key, original text as tie-break."""
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), name


def _parse_uuid(value: str | UUID) -> UUID | None:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except ValueError:
        return None


def _to_record(model: ServiceReportModel) -> ServiceReportRecord:
    return ServiceReportRecord(
        id=model.id,
        building_id=model.building_id,
        report_date=model.report_date,
        status=ReportStatus(model.status),
        client_summary=model.client_summary,
        internal_notes=model.internal_notes,
        sent_at=model.sent_at,
        sent_by=model.sent_by,
        created_at=model.created_at,
        updated_at=model.updated_at,
        created_by=model.created_by,
        updated_by=model.updated_by,
    )


def _to_item(model: TemplateItemModel) -> ReportItem:
    try:
        kind = ItemKind(model.item_kind) if model.item_kind else None
    except ValueError:
        kind = None
    return ReportItem(
        id=model.id,
        template_id=model.template_id,
        label=model.label,
        item_type=model.item_type,
        required=bool(model.required),
        sort_order=model.sort_order,
        item_kind=kind,
    )


def _to_response(model: VisitResponseModel) -> ReportResponse:
    return ReportResponse(
        visit_id=model.visit_id,
        item_id=model.item_id,
        equipment_id=model.equipment_id,
        value_text=model.value_text,
        value_number=model.value_number,
        value_bool=model.value_bool,
        created_at=model.created_at,
    )


def equipment_label(equipment: EquipmentModel, locale: str | None = None) -> str:
    """Name, else tag, else serial, else a short id."""
    for candidate in (equipment.name, equipment.tag, equipment.serial):
        if candidate and candidate.strip():
            return candidate.strip()
    return f"{labels_for(locale)['equipment']} {str(equipment.id)[:6]}"


async def _fetch_report(
    session: AsyncSession, building_id: UUID, day: date
) -> ServiceReportModel | None:
    result = await session.execute(
        select(ServiceReportModel).where(
            ServiceReportModel.building_id == building_id,
            ServiceReportModel.report_date == day,
        )
    )
    return result.scalar_one_or_none()


async def ensure_service_report(
    session: AsyncSession,
    building_id: UUID,
    day: date,
    user_id: UUID | None = None,
) -> tuple[ServiceReportRecord | None, ServiceReportError | None]:
    """Fetch the (building, day) report row, creating a draft if absent.

    Two first views of the same day may race; the loser's unique-key
    violation is rolled back and the winner's row is read instead.
    """
    try:
        existing = await _fetch_report(session, building_id, day)
        if existing is not None:
            return _to_record(existing), None

        report = ServiceReportModel(
            building_id=building_id,
            report_date=day,
            status=ReportStatus.DRAFT.value,
            created_by=user_id,
            updated_by=user_id,
        )
        session.add(report)
        try:
            await session.flush()
        except IntegrityError:
            await session.rollback()
            logger.info(
                "service_report_create_conflict",
                building_id=str(building_id),
                report_date=day.isoformat(),
            )
            existing = await _fetch_report(session, building_id, day)
            if existing is None:
                return None, DataLayerError("Service report could not be created.")
            return _to_record(existing), None

        await session.refresh(report)
        logger.info(
            "service_report_created",
            report_id=str(report.id),
            building_id=str(building_id),
            report_date=day.isoformat(),
        )
        return _to_record(report), None
    except SQLAlchemyError as exc:
        return None, DataLayerError(str(exc))


async def _fetch_completed_visits(
    session: AsyncSession, building_id: UUID, day_range: DayRange
) -> list[VisitModel]:
    result = await session.execute(
        select(VisitModel)
        .where(
            VisitModel.building_id == building_id,
            VisitModel.status == VisitStatus.COMPLETED.value,
            VisitModel.completed_at >= day_range.start,
            VisitModel.completed_at < day_range.end,
        )
        .order_by(VisitModel.completed_at.asc())
    )
    return list(result.scalars())


async def _load_visit_details(
    session: AsyncSession,
    visits: Sequence[VisitModel],
) -> tuple[
    dict[UUID, str],
    dict[UUID, list[ReportItem]],
    list[ReportResponse],
    dict[UUID, EquipmentModel],
]:
    template_ids = list(dict.fromkeys(v.template_id for v in visits if v.template_id))
    visit_ids = [v.id for v in visits]

    template_names: dict[UUID, str] = {}
    items_by_template: dict[UUID, list[ReportItem]] = defaultdict(list)
    responses: list[ReportResponse] = []
    equipment: dict[UUID, EquipmentModel] = {}

    if template_ids:
        rows = await session.execute(
            select(VisitTemplateModel).where(VisitTemplateModel.id.in_(template_ids))
        )
        template_names = {t.id: t.name for t in rows.scalars()}

        rows = await session.execute(
            select(TemplateItemModel)
            .where(TemplateItemModel.template_id.in_(template_ids))
            .order_by(TemplateItemModel.sort_order.asc(), TemplateItemModel.id.asc())
        )
        for item in rows.scalars():
            items_by_template[item.template_id].append(_to_item(item))

    if visit_ids:
        rows = await session.execute(
            select(VisitResponseModel)
            .where(VisitResponseModel.visit_id.in_(visit_ids))
            .order_by(VisitResponseModel.created_at.asc())
        )
        responses = [_to_response(r) for r in rows.scalars()]

    equipment_ids = list(dict.fromkeys(r.equipment_id for r in responses if r.equipment_id))
    if equipment_ids:
        rows = await session.execute(
            select(EquipmentModel).where(EquipmentModel.id.in_(equipment_ids))
        )
        equipment = {e.id: e for e in rows.scalars()}

    return template_names, items_by_template, responses, equipment


def build_sections(
    visits: Sequence[VisitModel],
    template_names: dict[UUID, str],
    items_by_template: dict[UUID, list[ReportItem]],
    responses: Sequence[ReportResponse],
    equipment: dict[UUID, EquipmentModel],
    locale: str | None = None,
) -> list[ReportSection]:
    """Group visits by template and attach each visit's latest responses."""
    responses_by_visit: dict[UUID, list[ReportResponse]] = defaultdict(list)
    for response in responses:
        if response.visit_id is not None:
            responses_by_visit[response.visit_id].append(response)

    fallback_name = labels_for(locale)["template_fallback"]
    sections: dict[UUID, ReportSection] = {}

    for visit in visits:
        if visit.template_id is None:
            continue

        visit_responses = responses_by_visit.get(visit.id, [])
        labels = [
            equipment_label(equipment[r.equipment_id], locale)
            for r in visit_responses
            if r.equipment_id in equipment
        ]

        section = sections.get(visit.template_id)
        if section is None:
            section = ReportSection(
                template_id=visit.template_id,
                template_name=template_names.get(visit.template_id) or fallback_name,
                items=list(items_by_template.get(visit.template_id, [])),
            )
            sections[visit.template_id] = section

        section.visits.append(
            ReportVisit(
                id=visit.id,
                template_id=visit.template_id,
                completed_at=visit.completed_at,
                equipment_labels=list(dict.fromkeys(labels)),
                latest_response_by_item_id=latest_by_item(visit_responses),
            )
        )

    ordered = sorted(
        sections.values(),
        key=lambda s: (_collation_key(s.template_name), str(s.template_id)),
    )
    for section in ordered:
        section.visits.sort(key=lambda v: v.completed_at or _EPOCH)
    return ordered


async def get_service_report_data(
    session: AsyncSession,
    building_id: str | UUID,
    report_date: str,
    user_id: UUID | None = None,
    time_zone: str | None = None,
    locale: str | None = None,
) -> tuple[ServiceReportData | None, ServiceReportError | None]:
    """Aggregate one building's completed visits for one civil day.

    A day without completed visits yields an empty section list, not an
    error. The report row for the day is created on first view.
    """
    report_config = get_config().report
    time_zone = time_zone or report_config.time_zone
    locale = locale or report_config.locale

    day = parse_date(report_date)
    day_range = resolve_day_range(report_date, time_zone)
    if day is None or day_range is None:
        return None, InvalidInputError("Invalid date. Use the YYYY-MM-DD format.")

    building_uuid = _parse_uuid(building_id)
    if building_uuid is None:
        return None, NotFoundError("Building not found.")

    log = logger.bind(building_id=str(building_uuid), report_date=report_date)

    try:
        building_model = await session.get(BuildingModel, building_uuid)
    except SQLAlchemyError as exc:
        return None, DataLayerError(str(exc))
    if building_model is None:
        return None, NotFoundError("Building not found.")

    building = ReportBuilding(
        id=building_model.id,
        name=building_model.name or labels_for(locale)["building_fallback"],
    )

    report, error = await ensure_service_report(session, building.id, day, user_id)
    if error is not None:
        return None, error

    try:
        visits = await _fetch_completed_visits(session, building.id, day_range)
        template_names, items_by_template, responses, equipment = await _load_visit_details(
            session, visits
        )
    except SQLAlchemyError as exc:
        log.error("service_report_query_failed", error=str(exc))
        return None, DataLayerError(str(exc))

    sections = build_sections(
        visits, template_names, items_by_template, responses, equipment, locale
    )
    log.info("service_report_aggregated", visits=len(visits), sections=len(sections))

    return (
        ServiceReportData(
            building=building,
            report_date=day.isoformat(),
            report=report,
            time_zone=time_zone,
            sections=sections,
        ),
        None,
    )
