from __future__ import annotations

from typing import Iterable, Optional, Union

from production.models import Aviary, FeatheringQuality
from production.services.periods import format_local_date, today
from production.services.records import CharacterizationSnapshot, ComputedRecord

DELIMITER = ";"
LINE_SEPARATOR = "\n"

RECORD_EXPORT_HEADERS = [
    "ID",
    "Data",
    "Aviário",
    "Lote",
    "Ovos Limpos",
    "Ovos Sujos",
    "Ovos Trincados",
    "Ovos de Cama",
    "Aves Vivas",
    "Peso Ovos (g)",
    "Peso Aves (g)",
    "Mortalidade",
    "Observação",
]

CHARACTERIZATION_EXPORT_HEADERS = [
    "ID",
    "Data",
    "Aviário",
    "Lote",
    "Idade Semanas",
    "Peso Lote (g)",
    "Uniformidade (%)",
    "Empenamento",
]

RECORDS_FILENAME_PREFIX = "aviario_registros"
CHARACTERIZATION_FILENAME_PREFIX = "caracterizacao_lotes"

Number = Union[int, float]


def export_filename(prefix: str) -> str:
    return f"{prefix}_{today()}.csv"


def format_decimal(value: Optional[Number]) -> str:
    """Render a number with a decimal comma; ``None`` becomes an empty cell."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).replace(".", ",")


def quote_text(value: Optional[str], *, always: bool = False) -> str:
    text = value or ""
    if not text:
        return ""
    if always or any(marker in text for marker in (DELIMITER, '"', "\n", "\r")):
        return '"' + text.replace('"', '""') + '"'
    return text


def _aviary_label(aviary: str) -> str:
    try:
        return Aviary(aviary).label
    except ValueError:
        return str(aviary)


def _join(rows: Iterable[list[str]], headers: list[str]) -> str:
    lines = [DELIMITER.join(headers)]
    lines.extend(DELIMITER.join(row) for row in rows)
    return LINE_SEPARATOR.join(lines)


def export_records_csv(records: Iterable[ComputedRecord]) -> str:
    rows = (
        [
            quote_text(record.identifier),
            format_local_date(record.date),
            _aviary_label(record.aviary),
            quote_text(record.batch_id),
            format_decimal(record.clean),
            format_decimal(record.dirty),
            format_decimal(record.cracked),
            format_decimal(record.floor_eggs),
            format_decimal(record.birds),
            format_decimal(record.egg_weight),
            format_decimal(record.bird_weight),
            format_decimal(record.mortality),
            quote_text(record.observation, always=True),
        ]
        for record in records
    )
    return _join(rows, RECORD_EXPORT_HEADERS)


def export_characterizations_csv(snapshots: Iterable[CharacterizationSnapshot]) -> str:
    rows = (
        [
            quote_text(snapshot.identifier),
            format_local_date(snapshot.date),
            _aviary_label(snapshot.aviary),
            quote_text(snapshot.batch_id),
            format_decimal(snapshot.week_age),
            format_decimal(snapshot.batch_weight),
            format_decimal(snapshot.uniformity),
            FeatheringQuality(snapshot.feathering).label,
        ]
        for snapshot in snapshots
    )
    return _join(rows, CHARACTERIZATION_EXPORT_HEADERS)
