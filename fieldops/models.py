"""fieldops Pydantic models and enums shared across layers.

String enums mirror the values stored in the database so that rows and
request payloads can be validated against the same vocabulary.
"""

from __future__ import annotations

from enum import Enum
from uuid import UUID

from pydantic import BaseModel


class ItemType(str, Enum):
    """Value shape a template item collects."""

    CHECKBOX = "checkbox"
    NUMBER = "number"
    TEXT = "text"
    TEXTAREA = "textarea"


class ItemKind(str, Enum):
    """Presentation kind decided when the template is authored."""

    STANDARD = "standard"
    FLOOR_ROUNDS = "floor_rounds"  # per-floor inspection table stored as JSON text


class TemplateCategory(str, Enum):
    PUMP = "pump"
    FIRE = "fire"


class VisitStatus(str, Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    MISSED = "missed"


class ReportStatus(str, Enum):
    """Editorial status of a day's service report."""

    DRAFT = "draft"
    READY = "ready"
    SENT = "sent"


class ReportAction(str, Enum):
    MARK_READY = "mark_ready"
    SEND = "send"


class UserRole(str, Enum):
    TECHNICIAN = "technician"
    OPS_MANAGER = "ops_manager"
    DIRECTOR = "director"


class CurrentUser(BaseModel):
    """Identity resolved by the upstream auth layer."""

    user_id: UUID
    role: UserRole

