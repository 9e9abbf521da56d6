from __future__ import annotations

from io import BytesIO
from typing import Any, Iterable, Optional

from openpyxl import Workbook
from openpyxl.styles import Font

from production.models import Aviary
from production.services.periods import today
from production.services.records import ComputedRecord
from reports.services.production_dashboard import (
    ProductionFilter,
    fortnight_report,
    summarize_records,
)

PERCENT_FORMAT = "0.0%"
DECIMAL_FORMAT = "0.0"
SUMMARY_SHEET_TITLE = "Resumo"
FORTNIGHT_SHEET_TITLE = "Quinzenas"


def report_filename() -> str:
    return f"relatorio_quinzenas_{today()}.xlsx"


def _normalize_export_value(value: Any) -> Any:
    if value is None:
        return ""
    return value


def _append_row(sheet, values: Iterable[Any], number_format: Optional[str] = None) -> None:
    sheet.append([_normalize_export_value(value) for value in values])
    if number_format:
        for cell in sheet[sheet.max_row][1:]:
            if cell.value != "":
                cell.number_format = number_format


def build_fortnight_workbook(
    records: Iterable[ComputedRecord],
    production_filter: Optional[ProductionFilter] = None,
) -> bytes:
    """Render the summary and the per-fortnight table as an ``.xlsx`` file."""
    records = list(records)
    production_filter = production_filter or ProductionFilter()
    summary = summarize_records(records)

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SUMMARY_SHEET_TITLE
    sheet.append(["Relatório de Produção"])
    sheet["A1"].font = Font(bold=True)
    sheet.append(["Filtros", production_filter.describe()])
    sheet.append(["Gerado em", today()])
    sheet.append([])
    _append_row(sheet, ("Registros", summary.record_count))
    _append_row(sheet, ("Total de ovos", summary.total_eggs))
    _append_row(sheet, ("Aves vivas", summary.live_birds))
    _append_row(sheet, ("Mortalidade", summary.total_mortality))
    _append_row(sheet, ("Taxa de postura média", summary.average_laying_rate), PERCENT_FORMAT)
    _append_row(sheet, ("Taxa de mortalidade", summary.mortality_rate), PERCENT_FORMAT)
    _append_row(sheet, ("Peso médio dos ovos (g)", summary.average_egg_weight), DECIMAL_FORMAT)
    _append_row(sheet, ("Peso médio das aves (g)", summary.average_bird_weight), DECIMAL_FORMAT)
    _append_row(sheet, ("Ovos limpos", summary.perc_clean), PERCENT_FORMAT)
    _append_row(sheet, ("Ovos sujos", summary.perc_dirty), PERCENT_FORMAT)
    _append_row(sheet, ("Ovos trincados", summary.perc_cracked), PERCENT_FORMAT)
    _append_row(sheet, ("Ovos de cama", summary.perc_floor_eggs), PERCENT_FORMAT)

    fortnight_sheet = workbook.create_sheet(FORTNIGHT_SHEET_TITLE)
    aviaries = Aviary.values
    headers = ["Quinzena", "Total de ovos", "Taxa geral"]
    for label in Aviary.labels:
        headers.extend([f"{label} - Ovos", f"{label} - Taxa"])
    fortnight_sheet.append(headers)
    for cell in fortnight_sheet[1]:
        cell.font = Font(bold=True)

    for row in fortnight_report(records):
        values: list[Any] = [row.fortnight, row.total_eggs, row.laying_rate]
        for aviary in aviaries:
            values.extend([row.aviary_totals.get(aviary, 0), row.aviary_rates.get(aviary)])
        fortnight_sheet.append([_normalize_export_value(value) for value in values])
        current = fortnight_sheet[fortnight_sheet.max_row]
        rate_columns = [2] + [4 + 2 * offset for offset in range(len(aviaries))]
        for index in rate_columns:
            if current[index].value != "":
                current[index].number_format = PERCENT_FORMAT

    buffer = BytesIO()
    workbook.save(buffer)
    buffer.seek(0)
    return buffer.getvalue()
