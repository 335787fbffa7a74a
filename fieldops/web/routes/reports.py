"""Service report routes for the fieldops web UI.

Routes:
- GET  /api/reports/service-report                        - PDF download
- GET  /ops/buildings/{building_id}/service-report        - In-page report view
- POST /ops/buildings/{building_id}/service-report/notes  - Save summary and notes
- POST /ops/buildings/{building_id}/service-report/ready  - draft -> ready
- POST /ops/buildings/{building_id}/service-report/send   - ready -> sent
"""

from __future__ import annotations

import traceback
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.config import get_config
from fieldops.dates import format_date_label, format_local_datetime
from fieldops.db.connection import get_db
from fieldops.db.models import BuildingModel
from fieldops.errors import DataLayerError, InvalidInputError, NotFoundError
from fieldops.models import CurrentUser, ReportAction, UserRole
from fieldops.reporting.floor_rounds import table_lines
from fieldops.reporting.formatting import format_response_value
from fieldops.reporting.i18n import labels_for
from fieldops.reporting.pdf_export import render_service_report_pdf
from fieldops.reporting.service_report import get_service_report_data
from fieldops.reporting.workflow import apply_report_action, update_report_notes
from fieldops.web.dependencies import get_templates, report_editors, report_readers

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["reports"])


def _pdf_error_response(exc: Exception) -> Response:
    """500 body for a failed export; details only outside production."""
    if get_config().is_production:
        return PlainTextResponse("Error generating PDF", status_code=500)
    return JSONResponse(
        status_code=500,
        content={
            "ok": False,
            "error": str(exc),
            "stack": "".join(traceback.format_exception(exc)),
        },
    )


def _report_url(building_id: UUID | str, report_date: str) -> str:
    url = f"/ops/buildings/{building_id}/service-report"
    return f"{url}?date={report_date}" if report_date else url


# ============================================================================
# PDF export
# ============================================================================


@router.get("/api/reports/service-report")
async def export_service_report(
    building_id: str | None = Query(default=None, alias="buildingId"),
    report_date: str | None = Query(default=None, alias="reportDate"),
    user: CurrentUser = Depends(report_readers),
    session: AsyncSession = Depends(get_db),
):
    """Download one building's day of completed visits as a PDF."""
    building_id = (building_id or "").strip()
    report_date = (report_date or "").strip()
    if not building_id or not report_date:
        return JSONResponse(
            status_code=400,
            content={"error": "Missing buildingId and reportDate parameters."},
        )

    log = logger.bind(building_id=building_id, report_date=report_date)
    log.info("service_report_started", role=user.role.value)

    data, error = await get_service_report_data(
        session, building_id, report_date, user_id=user.user_id
    )
    if isinstance(error, (InvalidInputError, NotFoundError)):
        return JSONResponse(status_code=error.status_code, content={"error": error.message})
    if error is not None or data is None:
        log.error("service_report_data_failed", error=str(error))
        return _pdf_error_response(error or DataLayerError("Report data unavailable."))

    log.info(
        "service_report_data",
        has_report=data.report is not None,
        sections=len(data.sections),
    )

    try:
        content = render_service_report_pdf(data, get_config().report)
    except Exception as exc:
        log.exception("service_report_render_failed")
        return _pdf_error_response(exc)

    return Response(
        content=content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="service-report-{report_date}.pdf"'
        },
    )


# ============================================================================
# In-page view and editorial actions
# ============================================================================


def _building_uuid(building_id: str) -> UUID:
    try:
        return UUID(building_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Building not found") from None


async def _load_building(session: AsyncSession, building_id: str) -> BuildingModel:
    building = await session.get(BuildingModel, _building_uuid(building_id))
    if building is None:
        raise HTTPException(status_code=404, detail="Building not found")
    return building


@router.get("/ops/buildings/{building_id}/service-report", response_class=HTMLResponse)
async def service_report_page(
    request: Request,
    building_id: str,
    date: str | None = Query(default=None),
    user: CurrentUser = Depends(report_readers),
    session: AsyncSession = Depends(get_db),
    templates=Depends(get_templates),
):
    """Report view with the editorial controls for ops managers."""
    report_config = get_config().report
    building = await _load_building(session, building_id)
    report_date = (date or "").strip()

    data, error = None, None
    if report_date:
        data, error = await get_service_report_data(
            session, building.id, report_date, user_id=user.user_id
        )

    labels = labels_for(report_config.locale)

    def item_rows(item, visit) -> list[str] | None:
        response = visit.response_for(item.id)
        return table_lines(
            item.label,
            item.item_kind,
            response.value_text if response else None,
            report_config.locale,
        )

    def item_value(item, visit) -> str:
        return format_response_value(
            item.item_type, visit.response_for(item.id), report_config.locale
        )

    return templates.TemplateResponse(
        request,
        "service_report.html",
        {
            "building": building,
            "report_date": report_date,
            "data": data,
            "error": error,
            "is_ops_manager": user.role == UserRole.OPS_MANAGER,
            "labels": labels,
            "time_zone": report_config.time_zone,
            "date_label": format_date_label(report_date, labels["date_format"]),
            "local_time": lambda instant: format_local_datetime(
                instant, report_config.time_zone, labels["datetime_format"]
            ),
            "item_rows": item_rows,
            "item_value": item_value,
        },
        status_code=error.status_code if error is not None else 200,
    )


@router.post("/ops/buildings/{building_id}/service-report/notes")
async def save_report_notes(
    building_id: str,
    report_id: UUID = Form(...),
    date: str = Form(default=""),
    client_summary: str = Form(default="", max_length=20000),
    internal_notes: str = Form(default="", max_length=20000),
    user: CurrentUser = Depends(report_editors),
    session: AsyncSession = Depends(get_db),
):
    await update_report_notes(
        session,
        report_id,
        client_summary,
        internal_notes,
        user_id=user.user_id,
        building_id=_building_uuid(building_id),
    )
    await session.commit()
    return RedirectResponse(url=_report_url(building_id, date.strip()), status_code=303)


@router.post("/ops/buildings/{building_id}/service-report/ready")
async def mark_report_ready(
    building_id: str,
    report_id: UUID = Form(...),
    date: str = Form(default=""),
    user: CurrentUser = Depends(report_editors),
    session: AsyncSession = Depends(get_db),
):
    await apply_report_action(
        session,
        report_id,
        ReportAction.MARK_READY,
        user.user_id,
        building_id=_building_uuid(building_id),
    )
    await session.commit()
    return RedirectResponse(url=_report_url(building_id, date.strip()), status_code=303)


@router.post("/ops/buildings/{building_id}/service-report/send")
async def send_report(
    building_id: str,
    report_id: UUID = Form(...),
    date: str = Form(default=""),
    user: CurrentUser = Depends(report_editors),
    session: AsyncSession = Depends(get_db),
):
    await apply_report_action(
        session,
        report_id,
        ReportAction.SEND,
        user.user_id,
        building_id=_building_uuid(building_id),
    )
    await session.commit()
    return RedirectResponse(url=_report_url(building_id, date.strip()), status_code=303)
