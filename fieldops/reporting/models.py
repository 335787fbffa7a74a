"""Data structures produced by the service report aggregator.

The same tree feeds the PDF export and the in-page view.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID

from fieldops.models import ItemKind, ReportStatus


@dataclass(slots=True)
class ReportBuilding:
    id: UUID
    name: str


@dataclass(slots=True)
class ReportItem:
    id: UUID
    template_id: UUID
    label: str
    item_type: str
    required: bool
    sort_order: int
    item_kind: ItemKind | None = None


@dataclass(slots=True)
class ReportResponse:
    visit_id: UUID | None
    item_id: UUID | None
    equipment_id: UUID | None
    value_text: str | None
    value_number: float | None
    value_bool: bool | None
    created_at: datetime


@dataclass(slots=True)
class ReportVisit:
    id: UUID
    template_id: UUID
    completed_at: datetime | None
    equipment_labels: list[str] = field(default_factory=list)
    latest_response_by_item_id: dict[UUID, ReportResponse] = field(default_factory=dict)

    def response_for(self, item_id: UUID) -> ReportResponse | None:
        return self.latest_response_by_item_id.get(item_id)


@dataclass(slots=True)
class ReportSection:
    """All of one template's executions for the day."""

    template_id: UUID
    template_name: str
    items: list[ReportItem] = field(default_factory=list)
    visits: list[ReportVisit] = field(default_factory=list)


@dataclass(slots=True)
class ServiceReportRecord:
    id: UUID
    building_id: UUID
    report_date: date
    status: ReportStatus
    client_summary: str | None
    internal_notes: str | None
    sent_at: datetime | None
    sent_by: UUID | None
    created_at: datetime
    updated_at: datetime
    created_by: UUID | None
    updated_by: UUID | None

    @property
    def can_mark_ready(self) -> bool:
        return self.status == ReportStatus.DRAFT

    @property
    def can_send(self) -> bool:
        return self.status == ReportStatus.READY


@dataclass(slots=True)
class ServiceReportData:
    building: ReportBuilding
    report_date: str
    report: ServiceReportRecord | None
    time_zone: str
    sections: list[ReportSection] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.sections
