from __future__ import annotations

from pathlib import Path
from typing import Any

from django.core.management.base import BaseCommand, CommandError, CommandParser

from production.models import Aviary
from production.services.ledger import ProductionLedger
from production.services.repository import CharacterizationRepository, ProductionRecordRepository
from reports.services.production_dashboard import ProductionFilter, TimeWindow, filter_records
from reports.services.workbook_export import build_fortnight_workbook, report_filename


class Command(BaseCommand):
    help = "Gera a planilha (.xlsx) com o resumo e a produção por quinzena dos registros filtrados."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--output",
            required=True,
            help="Arquivo .xlsx de destino ou diretório onde ele será criado.",
        )
        parser.add_argument("--aviary", choices=Aviary.values, help="Restringe a um aviário.")
        parser.add_argument("--batch", dest="batch_id", help="Restringe a um lote.")
        parser.add_argument("--year", type=int, help="Ano (tem prioridade sobre --time).")
        parser.add_argument(
            "--fortnight",
            help='Quinzena, ex.: "Jan/2024 - 1ª Quinzena" (tem prioridade sobre --year).',
        )
        parser.add_argument(
            "--time",
            choices=TimeWindow.values,
            default=TimeWindow.ALL,
            help="Janela de tempo quando não há quinzena nem ano (default: all).",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        production_filter = ProductionFilter(
            time=options["time"],
            aviary=options.get("aviary"),
            fortnight=options.get("fortnight"),
            year=options.get("year"),
            batch_id=options.get("batch_id"),
        )
        ledger = ProductionLedger(ProductionRecordRepository(), CharacterizationRepository())
        records = filter_records(ledger.computed_records(), production_filter)
        if not records:
            self.stdout.write(self.style.WARNING("Nenhum registro para os filtros informados."))

        target = Path(options["output"])
        if target.is_dir():
            target = target / report_filename()
        try:
            target.write_bytes(build_fortnight_workbook(records, production_filter))
        except OSError as exc:
            raise CommandError(f"Não foi possível escrever em {target}: {exc}") from exc

        self.stdout.write(self.style.MIGRATE_HEADING(production_filter.describe()))
        self.stdout.write(self.style.SUCCESS(f"Planilha gerada: {target} ({len(records)} registros)"))
