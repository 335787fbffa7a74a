"""Editorial workflow for service reports.

Status only moves forward: draft → ready → sent. Every change goes through
``next_status`` and is applied with a guarded UPDATE so that two managers
acting at once cannot both succeed.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.db.models import ServiceReportModel
from fieldops.errors import DataLayerError, InvalidTransitionError, NotFoundError
from fieldops.models import ReportAction, ReportStatus

logger = structlog.get_logger(__name__)

TRANSITIONS: dict[tuple[ReportStatus, ReportAction], ReportStatus] = {
    (ReportStatus.DRAFT, ReportAction.MARK_READY): ReportStatus.READY,
    (ReportStatus.READY, ReportAction.SEND): ReportStatus.SENT,
}


def next_status(current: ReportStatus | str, action: ReportAction | str) -> ReportStatus:
    """Return the status reached by ``action`` or raise InvalidTransitionError."""
    current = ReportStatus(current)
    action = ReportAction(action)
    try:
        return TRANSITIONS[(current, action)]
    except KeyError:
        raise InvalidTransitionError(
            f"Cannot {action.value} a report in status '{current.value}'."
        ) from None


def _clean(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


async def _load(
    session: AsyncSession, report_id: UUID, building_id: UUID | None = None
) -> ServiceReportModel:
    report = await session.get(ServiceReportModel, report_id)
    if report is None or (building_id is not None and report.building_id != building_id):
        raise NotFoundError("Service report not found.")
    return report


async def apply_report_action(
    session: AsyncSession,
    report_id: UUID,
    action: ReportAction | str,
    user_id: UUID | None,
    building_id: UUID | None = None,
) -> ReportStatus:
    """Move a report forward one step and stamp who did it.

    Raises:
        NotFoundError: unknown report, or one belonging to another building
        InvalidTransitionError: action not allowed from the current status,
            including when a concurrent request changed it first
        DataLayerError: the store failed
    """
    action = ReportAction(action)
    try:
        report = await _load(session, report_id, building_id)
        current = ReportStatus(report.status)
        target = next_status(current, action)

        now = datetime.now(timezone.utc)
        values: dict[str, object] = {
            "status": target.value,
            "updated_at": now,
            "updated_by": user_id,
        }
        if target == ReportStatus.SENT:
            values.update(sent_at=now, sent_by=user_id)

        result = await session.execute(
            update(ServiceReportModel)
            .where(
                ServiceReportModel.id == report_id,
                ServiceReportModel.status == current.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
    except SQLAlchemyError as exc:
        raise DataLayerError(str(exc)) from exc

    if result.rowcount != 1:
        raise InvalidTransitionError("The report status changed before this action was applied.")

    await session.refresh(report)
    logger.info(
        "service_report_status_changed",
        report_id=str(report_id),
        action=action.value,
        status=target.value,
    )
    return target


async def update_report_notes(
    session: AsyncSession,
    report_id: UUID,
    client_summary: str | None,
    internal_notes: str | None,
    user_id: UUID | None,
    building_id: UUID | None = None,
) -> None:
    """Replace the free-text blocks; blank text is stored as NULL."""
    try:
        await _load(session, report_id, building_id)
        await session.execute(
            update(ServiceReportModel)
            .where(ServiceReportModel.id == report_id)
            .values(
                client_summary=_clean(client_summary),
                internal_notes=_clean(internal_notes),
                updated_at=datetime.now(timezone.utc),
                updated_by=user_id,
            )
            .execution_options(synchronize_session=False)
        )
    except SQLAlchemyError as exc:
        raise DataLayerError(str(exc)) from exc
    logger.info("service_report_notes_updated", report_id=str(report_id))

