"""Database layer for fieldops with async SQLAlchemy."""

from fieldops.db.connection import get_db, get_session, init_db
from fieldops.db.models import (
    Base,
    BuildingModel,
    EquipmentModel,
    ServiceReportModel,
    TemplateItemModel,
    VisitModel,
    VisitResponseModel,
    VisitTemplateModel,
)

__all__ = [
    "Base",
    "BuildingModel",
    "EquipmentModel",
    "VisitTemplateModel",
    "TemplateItemModel",
    "VisitModel",
    "VisitResponseModel",
    "ServiceReportModel",
    "get_db",
    "get_session",
    "init_db",
]
