from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from production.services.csv_parser import parse_characterization_csv, parse_production_csv
from production.services.derivation import derive_records, resolve_batch, sort_snapshots
from production.services.exports import export_characterizations_csv, export_records_csv
from production.services.imports import characterization_key, production_key, reconcile_import
from production.services.records import CharacterizationSnapshot, ComputedRecord, ProductionRecord
from production.services.repository import RecordRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportResult:
    processed_rows: int
    created_count: int
    updated_count: int


class ProductionLedger:
    """Ties the derivation engine to the two persisted collections.

    Nothing is cached: every read goes back to the repositories, so callers
    see fresh derivations after any write.
    """

    def __init__(
        self,
        records_repository: RecordRepository[ProductionRecord],
        characterization_repository: RecordRepository[CharacterizationSnapshot],
    ) -> None:
        self.records_repository = records_repository
        self.characterization_repository = characterization_repository

    def computed_records(self) -> list[ComputedRecord]:
        return derive_records(self.records_repository.load(), self.characterization_repository.load())

    def characterizations(self) -> list[CharacterizationSnapshot]:
        return sort_snapshots(self.characterization_repository.load())

    def resolve_batch(self, aviary: str, record_date: str) -> Optional[str]:
        return resolve_batch(aviary, record_date, self.characterization_repository.load())

    def import_records_csv(self, text: str) -> ImportResult:
        incoming = parse_production_csv(text)
        merged = reconcile_import(self.records_repository.load(), incoming, production_key)
        if incoming:
            self.records_repository.save(merged.records)
        result = ImportResult(
            processed_rows=len(incoming),
            created_count=merged.created_count,
            updated_count=merged.updated_count,
        )
        logger.info(
            "Importação de produção: %s linhas, %s novas, %s atualizadas",
            result.processed_rows,
            result.created_count,
            result.updated_count,
        )
        return result

    def import_characterizations_csv(self, text: str) -> ImportResult:
        incoming = parse_characterization_csv(text)
        merged = reconcile_import(self.characterization_repository.load(), incoming, characterization_key)
        if incoming:
            self.characterization_repository.save(merged.records)
        result = ImportResult(
            processed_rows=len(incoming),
            created_count=merged.created_count,
            updated_count=merged.updated_count,
        )
        logger.info(
            "Importação de caracterizações: %s linhas, %s novas, %s atualizadas",
            result.processed_rows,
            result.created_count,
            result.updated_count,
        )
        return result

    def export_records_csv(self) -> str:
        return export_records_csv(self.computed_records())

    def export_characterizations_csv(self) -> str:
        return export_characterizations_csv(self.characterizations())
