"""Report vocabulary for the supported locales."""

from __future__ import annotations

LABELS: dict[str, dict[str, str]] = {
    "es": {
        "yes": "Sí",
        "no": "No",
        "pass_glyph": "SI",
        "fail_glyph": "NO",
        "title": "Service report del día",
        "building": "Building",
        "date": "Fecha",
        "client_summary": "Resumen para cliente:",
        "internal_notes": "Notas internas:",
        "legend": "SI = OK · NO = Falla · N/A: escríbelo en Observaciones",
        "execution": "Ejecución",
        "equipment": "Equipo",
        "no_rows": "Sin filas.",
        "no_visits": "No hay visitas completadas para este día.",
        "no_items": "No hay items configurados para esta plantilla.",
        "signature": "Firma del encargado",
        "evidence": "Evidencia",
        "row": "Fila",
        "floor": "Piso",
        "inlet_pressure": "P. entrada",
        "outlet_pressure": "P. salida",
        "station_open": "E.C. abierta",
        "station_closed": "E.C. cerrada",
        "regulating_valve": "Válvula reguladora",
        "gauge_state": "Estado manómetro",
        "hose_cabinets": "Gabinetes/manguera",
        "extinguishers": "Extintores",
        "observation": "Obs",
        "template_fallback": "Plantilla",
        "building_fallback": "Building",
        "datetime_format": "%d/%m/%Y %H:%M",
        "date_format": "%d/%m/%Y",
    },
    "en": {
        "yes": "Yes",
        "no": "No",
        "pass_glyph": "YES",
        "fail_glyph": "NO",
        "title": "Daily service report",
        "building": "Building",
        "date": "Date",
        "client_summary": "Client summary:",
        "internal_notes": "Internal notes:",
        "legend": "YES = OK · NO = Fault · N/A: write it under Observations",
        "execution": "Execution",
        "equipment": "Equipment",
        "no_rows": "No rows.",
        "no_visits": "No completed visits for this day.",
        "no_items": "No items configured for this template.",
        "signature": "Supervisor signature",
        "evidence": "Evidence",
        "row": "Row",
        "floor": "Floor",
        "inlet_pressure": "Inlet P.",
        "outlet_pressure": "Outlet P.",
        "station_open": "Control station open",
        "station_closed": "Control station closed",
        "regulating_valve": "Regulating valve",
        "gauge_state": "Gauge state",
        "hose_cabinets": "Hose cabinets",
        "extinguishers": "Extinguishers",
        "observation": "Obs",
        "template_fallback": "Template",
        "building_fallback": "Building",
        "datetime_format": "%m/%d/%Y %H:%M",
        "date_format": "%m/%d/%Y",
    },
}


def labels_for(locale: str | None) -> dict[str, str]:
    """Vocabulary for ``locale``, falling back to Spanish."""
    return LABELS.get((locale or "es").lower(), LABELS["es"])
