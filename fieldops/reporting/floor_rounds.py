"""Codec for the floor-by-floor inspection table.

A "recorrido por pisos" item stores its whole table as a JSON array in a
single response's ``value_text``. The JSON keys below are the stored
format and are shared with the technician form.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from typing import Any

from fieldops.models import ItemKind
from fieldops.reporting.formatting import format_number
from fieldops.reporting.i18n import labels_for

FLOOR_ROUNDS_LABEL_PREFIX = "recorrido por pisos"

PLACEHOLDER = "—"

CHECK_FIELDS = (
    "estacion_control_abierta",
    "estacion_control_cerrada",
    "valvula_reguladora",
    "estado_manometro",
    "gabinetes_manguera",
    "extintores",
)


@dataclass(slots=True)
class RecorridoRow:
    """One floor of the walkthrough."""

    piso: str = ""
    presion_entrada: float | None = None
    presion_salida: float | None = None
    estacion_control_abierta: bool = False
    estacion_control_cerrada: bool = False
    valvula_reguladora: bool = False
    estado_manometro: bool = False
    gabinetes_manguera: bool = False
    extintores: bool = False
    observacion: str = ""


def is_floor_rounds_item(label: str | None = None, kind: ItemKind | str | None = None) -> bool:
    """True when an item holds the per-floor table instead of a scalar value.

    An explicit kind tag decides. Untagged items fall back to a
    case-insensitive prefix match on the label.
    """
    if kind is not None:
        try:
            return ItemKind(kind) == ItemKind.FLOOR_ROUNDS
        except ValueError:
            pass
    return (label or "").strip().lower().startswith(FLOOR_ROUNDS_LABEL_PREFIX)


def _finite_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if math.isfinite(value) else None


def _normalize_row(value: Any) -> RecorridoRow | None:
    if not isinstance(value, Mapping):
        return None

    piso = value.get("piso")
    observacion = value.get("observacion")
    return RecorridoRow(
        piso=piso if isinstance(piso, str) else "",
        presion_entrada=_finite_number(value.get("presion_entrada")),
        presion_salida=_finite_number(value.get("presion_salida")),
        observacion=observacion if isinstance(observacion, str) else "",
        **{name: bool(value.get(name)) for name in CHECK_FIELDS},
    )


def decode_rows(raw: str | None) -> list[RecorridoRow] | None:
    """Parse a stored table.

    Returns None when the value is empty, not JSON, or not an array, and a
    (possibly empty) list otherwise. Each element is coerced field by
    field; elements that are not objects are dropped.
    """
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(parsed, list):
        return None

    rows = (_normalize_row(element) for element in parsed)
    return [row for row in rows if row is not None]


def _number_or_none(value: Any) -> float | None:
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return None
        try:
            value = float(trimmed)
        except ValueError:
            return None
        if math.isfinite(value) and value.is_integer():
            value = int(value)
    return _finite_number(value)


def _draft_to_row(draft: RecorridoRow | Mapping[str, Any]) -> RecorridoRow:
    data = asdict(draft) if isinstance(draft, RecorridoRow) else dict(draft)
    return RecorridoRow(
        piso=str(data.get("piso") or "").strip(),
        presion_entrada=_number_or_none(data.get("presion_entrada")),
        presion_salida=_number_or_none(data.get("presion_salida")),
        observacion=str(data.get("observacion") or "").strip(),
        **{name: bool(data.get(name)) for name in CHECK_FIELDS},
    )


def encode_rows(rows: Iterable[RecorridoRow | Mapping[str, Any]]) -> str:
    """Serialize rows (or form drafts with string pressures) to the stored JSON."""
    normalized = [asdict(_draft_to_row(row)) for row in rows]
    return json.dumps(normalized, ensure_ascii=False, separators=(",", ":"))


def format_row(row: RecorridoRow, index: int, locale: str | None = None) -> str:
    """One-line rendering of a row; ``index`` is zero-based."""
    labels = labels_for(locale)

    def yes_no(value: bool) -> str:
        return labels["yes"] if value else labels["no"]

    parts = [
        f"{labels['row']} {index + 1}",
        f"{labels['floor']}: {row.piso.strip() or PLACEHOLDER}",
        f"{labels['inlet_pressure']}: {format_number(row.presion_entrada)}",
        f"{labels['outlet_pressure']}: {format_number(row.presion_salida)}",
        f"{labels['station_open']}: {yes_no(row.estacion_control_abierta)}",
        f"{labels['station_closed']}: {yes_no(row.estacion_control_cerrada)}",
        f"{labels['regulating_valve']}: {yes_no(row.valvula_reguladora)}",
        f"{labels['gauge_state']}: {yes_no(row.estado_manometro)}",
        f"{labels['hose_cabinets']}: {yes_no(row.gabinetes_manguera)}",
        f"{labels['extinguishers']}: {yes_no(row.extintores)}",
        f"{labels['observation']}: {row.observacion.strip() or PLACEHOLDER}",
    ]
    return " · ".join(parts)


def table_lines(
    label: str | None,
    kind: ItemKind | str | None,
    raw: str | None,
    locale: str | None = None,
) -> list[str] | None:
    """Display lines for a floor-rounds value.

    None means the item should be shown as a plain value instead: either it
    is not a floor-rounds item or its stored value does not decode.
    """
    if not is_floor_rounds_item(label, kind):
        return None
    rows = decode_rows(raw)
    if rows is None:
        return None
    if not rows:
        return [labels_for(locale)["no_rows"]]
    return [format_row(row, index, locale) for index, row in enumerate(rows)]
