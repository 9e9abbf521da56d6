from __future__ import annotations

from pathlib import Path
from typing import Any

from django.core.management.base import BaseCommand, CommandError, CommandParser

from production.services.csv_parser import BYTE_ORDER_MARK
from production.services.exports import (
    CHARACTERIZATION_FILENAME_PREFIX,
    RECORDS_FILENAME_PREFIX,
    export_filename,
)
from production.services.ledger import ProductionLedger
from production.services.repository import CharacterizationRepository, ProductionRecordRepository

from .import_aviary_csv import KIND_CHARACTERIZATION, KIND_PRODUCTION


class Command(BaseCommand):
    help = "Exporta os registros de produção ou as caracterizações de lote em CSV (separador ';')."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--kind",
            choices=(KIND_PRODUCTION, KIND_CHARACTERIZATION),
            default=KIND_PRODUCTION,
            help="Conjunto a exportar (default: production).",
        )
        parser.add_argument(
            "--output",
            help="Arquivo ou diretório de destino. Se omitido, o CSV é escrito na saída padrão.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        ledger = ProductionLedger(ProductionRecordRepository(), CharacterizationRepository())
        if options["kind"] == KIND_CHARACTERIZATION:
            content = ledger.export_characterizations_csv()
            prefix = CHARACTERIZATION_FILENAME_PREFIX
        else:
            content = ledger.export_records_csv()
            prefix = RECORDS_FILENAME_PREFIX

        output = options.get("output")
        if not output:
            self.stdout.write(content)
            return

        target = Path(output)
        if target.is_dir():
            target = target / export_filename(prefix)
        try:
            target.write_text(BYTE_ORDER_MARK + content, encoding="utf-8")
        except OSError as exc:
            raise CommandError(f"Não foi possível escrever em {target}: {exc}") from exc
        self.stdout.write(self.style.SUCCESS(f"Arquivo gerado: {target}"))
