from __future__ import annotations

from pathlib import Path
from typing import Any

from django.core.management.base import BaseCommand, CommandError, CommandParser

from production.services.ledger import ProductionLedger
from production.services.repository import CharacterizationRepository, ProductionRecordRepository

KIND_PRODUCTION = "production"
KIND_CHARACTERIZATION = "characterization"


class Command(BaseCommand):
    help = (
        "Importa um CSV de registros de produção ou de caracterização de lotes, "
        "atualizando os registros com a mesma data/aviário (e lote) e mantendo seus IDs."
    )

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("path", help="Caminho do arquivo CSV.")
        parser.add_argument(
            "--kind",
            choices=(KIND_PRODUCTION, KIND_CHARACTERIZATION),
            default=KIND_PRODUCTION,
            help="Tipo de arquivo (default: production).",
        )
        parser.add_argument(
            "--encoding",
            default="utf-8",
            help="Codificação do arquivo (default: utf-8).",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        path = Path(options["path"])
        try:
            text = path.read_text(encoding=options["encoding"])
        except FileNotFoundError as exc:
            raise CommandError(f"Arquivo não encontrado: {path}") from exc
        except (OSError, UnicodeDecodeError, LookupError) as exc:
            raise CommandError(f"Não foi possível ler o arquivo {path}: {exc}") from exc

        ledger = ProductionLedger(ProductionRecordRepository(), CharacterizationRepository())
        if options["kind"] == KIND_CHARACTERIZATION:
            result = ledger.import_characterizations_csv(text)
        else:
            result = ledger.import_records_csv(text)

        if not result.processed_rows:
            self.stdout.write(self.style.WARNING("Nenhum registro válido encontrado no arquivo."))
            return
        self.stdout.write(self.style.SUCCESS(f"Linhas importadas: {result.processed_rows}"))
        self.stdout.write(f"  Novos: {result.created_count}")
        self.stdout.write(f"  Atualizados: {result.updated_count}")
