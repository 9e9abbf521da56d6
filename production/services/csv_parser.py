from __future__ import annotations

import logging
import math
import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from production.models import Aviary, FeatheringQuality
from production.services.periods import is_iso_date, parse_local_date
from production.services.records import CharacterizationSnapshot, ProductionRecord, new_identifier

logger = logging.getLogger(__name__)

BYTE_ORDER_MARK = "\ufeff"
MIN_ROW_TOKENS = 3
MIN_REUSABLE_ID_LENGTH = 5

_LINE_BREAK_RE = re.compile(r"\r\n|\n")


@dataclass(frozen=True)
class HeaderRule:
    """Assign ``field`` to the first unclaimed header accepted by ``predicate``."""

    field: str
    predicate: Callable[[str], bool]


def _exact(*names: str) -> Callable[[str], bool]:
    return lambda header: header in names


def _contains_any(*fragments: str) -> Callable[[str], bool]:
    return lambda header: any(fragment in header for fragment in fragments)


def _contains_all(*fragments: str) -> Callable[[str], bool]:
    return lambda header: all(fragment in header for fragment in fragments)


# "id" is a substring of "idade" and "uniformidade", so identifier and date
# columns are matched exactly. Everything else is matched by containment.
PRODUCTION_HEADER_RULES: tuple[HeaderRule, ...] = (
    HeaderRule("identifier", _exact("id")),
    HeaderRule("date", _exact("data")),
    HeaderRule("aviary", _contains_any("aviario")),
    HeaderRule("batch_id", _contains_any("lote")),
    HeaderRule("clean", _contains_any("limpos")),
    HeaderRule("dirty", _contains_any("sujos")),
    HeaderRule("cracked", _contains_any("trincados")),
    HeaderRule("floor_eggs", _contains_any("cama")),
    HeaderRule("egg_weight", _contains_all("peso", "ovos")),
    HeaderRule("bird_weight", _contains_all("peso", "aves")),
    HeaderRule("birds", _contains_all("aves", "vivas")),
    HeaderRule("mortality", _contains_any("mort")),
    HeaderRule("observation", _contains_any("obs")),
)

# Uniformity is claimed before week age ("uniformidade" contains "idade") and
# batch weight ("Peso Lote") before the batch rule looks for "lote".
CHARACTERIZATION_HEADER_RULES: tuple[HeaderRule, ...] = (
    HeaderRule("identifier", _exact("id")),
    HeaderRule("date", _exact("data")),
    HeaderRule("aviary", _contains_any("aviario")),
    HeaderRule("uniformity", _contains_any("uniformidade")),
    HeaderRule("week_age", _contains_any("idade", "semanas")),
    HeaderRule("batch_weight", _contains_any("peso")),
    HeaderRule("feathering", _contains_any("empenamento")),
    HeaderRule("batch_id", _contains_any("lote")),
)

AVIARY_DIGITS: tuple[tuple[str, Aviary], ...] = (
    ("1", Aviary.A1),
    ("2", Aviary.A2),
    ("3", Aviary.A3),
    ("4", Aviary.A4),
)

# "bom" is also a substring of "muito bom", so the order matters.
FEATHERING_KEYWORDS: tuple[tuple[tuple[str, ...], FeatheringQuality], ...] = (
    (("muito bom",), FeatheringQuality.VERY_GOOD),
    (("bom",), FeatheringQuality.GOOD),
    (("regular",), FeatheringQuality.REGULAR),
    (("ruim",), FeatheringQuality.POOR),
    (("pessimo",), FeatheringQuality.VERY_POOR),
)


def _fold(value: Any) -> str:
    text = str(value or "").strip().lower()
    text = unicodedata.normalize("NFKD", text)
    return "".join(char for char in text if not unicodedata.combining(char))


def split_lines(text: str) -> list[str]:
    lines = [line for line in _LINE_BREAK_RE.split(text or "") if line.strip()]
    if lines and lines[0].startswith(BYTE_ORDER_MARK):
        lines[0] = lines[0][len(BYTE_ORDER_MARK):]
    return lines


def detect_delimiter(header_line: str) -> str:
    return ";" if ";" in header_line else ","


def split_csv_line(line: str, delimiter: str) -> list[str]:
    """Tokenize one line, keeping delimiters that appear inside double quotes."""
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
            current.append(char)
        elif char == delimiter and not in_quotes:
            tokens.append("".join(current))
            current = []
        else:
            current.append(char)
    tokens.append("".join(current))
    return [_clean_token(token) for token in tokens]


def _clean_token(token: str) -> str:
    text = token.strip()
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text.replace('""', '"')


def map_headers(headers: Sequence[str], rules: Sequence[HeaderRule]) -> dict[str, int]:
    """Resolve each rule to a column index; unmatched fields are left out."""
    normalized = [_fold(header).replace('"', "") for header in headers]
    claimed: set[int] = set()
    columns: dict[str, int] = {}
    for rule in rules:
        for index, header in enumerate(normalized):
            if index in claimed or not rule.predicate(header):
                continue
            columns[rule.field] = index
            claimed.add(index)
            break
    return columns


def parse_number(value: Optional[str]) -> float:
    """Decimal-comma aware float parsing; blank or garbage degrades to 0."""
    parsed = parse_nullable_number(value)
    return parsed if parsed is not None else 0.0


def parse_nullable_number(value: Optional[str]) -> Optional[float]:
    text = (value or "").strip()
    if not text:
        return None
    try:
        number = float(text.replace(",", "."))
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _parse_count(value: Optional[str]) -> int:
    return max(0, int(parse_number(value)))


def match_aviary(value: Optional[str]) -> Aviary:
    text = value or ""
    for digit, aviary in AVIARY_DIGITS:
        if digit in text:
            return aviary
    return Aviary.A1


def match_feathering(value: Optional[str]) -> FeatheringQuality:
    text = _fold(value)
    for keywords, quality in FEATHERING_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return quality
    return FeatheringQuality.GOOD


def _extract_row_values(tokens: Sequence[str], columns: dict[str, int]) -> dict[str, str]:
    return {field: tokens[index] for field, index in columns.items() if index < len(tokens)}


def _resolve_identifier(value: Optional[str]) -> str:
    if value and len(value) > MIN_REUSABLE_ID_LENGTH:
        return value
    return new_identifier()


def _prepare(text: str, rules: Sequence[HeaderRule]) -> tuple[list[str], str, dict[str, int]]:
    lines = split_lines(text)
    if len(lines) < 2:
        return [], ",", {}
    delimiter = detect_delimiter(lines[0])
    columns = map_headers(split_csv_line(lines[0], delimiter), rules)
    return lines[1:], delimiter, columns


def parse_production_csv(text: str) -> list[ProductionRecord]:
    body, delimiter, columns = _prepare(text, PRODUCTION_HEADER_RULES)
    records: list[ProductionRecord] = []
    for row_number, line in enumerate(body, start=2):
        tokens = split_csv_line(line, delimiter)
        if len(tokens) < MIN_ROW_TOKENS:
            logger.debug("Linha %s ignorada: colunas insuficientes", row_number)
            continue

        row = _extract_row_values(tokens, columns)
        raw_date = (row.get("date") or "").strip()
        clean = _parse_count(row.get("clean"))
        birds = _parse_count(row.get("birds"))
        if not raw_date and clean == 0 and birds == 0:
            logger.debug("Linha %s ignorada: linha vazia ou rodapé", row_number)
            continue
        record_date = parse_local_date(raw_date)
        if not is_iso_date(record_date):
            logger.debug("Linha %s ignorada: data inválida", row_number)
            continue

        records.append(
            ProductionRecord(
                identifier=_resolve_identifier(row.get("identifier")),
                date=record_date,
                aviary=match_aviary(row.get("aviary")),
                batch_id=row.get("batch_id") or None,
                clean=clean,
                dirty=_parse_count(row.get("dirty")),
                cracked=_parse_count(row.get("cracked")),
                floor_eggs=_parse_count(row.get("floor_eggs")),
                birds=birds,
                egg_weight=parse_nullable_number(row.get("egg_weight")),
                bird_weight=parse_nullable_number(row.get("bird_weight")),
                mortality=_parse_count(row.get("mortality")),
                observation=row.get("observation") or None,
            )
        )
    logger.debug("%s registros de produção lidos do CSV", len(records))
    return records


def parse_characterization_csv(text: str) -> list[CharacterizationSnapshot]:
    body, delimiter, columns = _prepare(text, CHARACTERIZATION_HEADER_RULES)
    snapshots: list[CharacterizationSnapshot] = []
    for row_number, line in enumerate(body, start=2):
        tokens = split_csv_line(line, delimiter)
        if len(tokens) < MIN_ROW_TOKENS:
            logger.debug("Linha %s ignorada: colunas insuficientes", row_number)
            continue

        row = _extract_row_values(tokens, columns)
        snapshot_date = parse_local_date(row.get("date"))
        week_age = _parse_count(row.get("week_age"))
        if not is_iso_date(snapshot_date) or week_age <= 0:
            logger.debug("Linha %s ignorada: data ou idade do lote ausente", row_number)
            continue

        snapshots.append(
            CharacterizationSnapshot(
                identifier=_resolve_identifier(row.get("identifier")),
                date=snapshot_date,
                aviary=match_aviary(row.get("aviary")),
                batch_id=row.get("batch_id", ""),
                week_age=week_age,
                batch_weight=parse_number(row.get("batch_weight")),
                uniformity=parse_number(row.get("uniformity")),
                feathering=match_feathering(row.get("feathering")),
            )
        )
    logger.debug("%s caracterizações lidas do CSV", len(snapshots))
    return snapshots
