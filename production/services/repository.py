from __future__ import annotations

import logging
from datetime import date
from typing import Generic, Iterable, Protocol, TypeVar

from django.db import DatabaseError, transaction

from production.models import Aviary, DailyProduction, FeatheringQuality, FlockCharacterization
from production.services.records import CharacterizationSnapshot, ProductionRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordRepository(Protocol[T]):
    """Whole-collection storage: ``load`` returns everything, ``save`` replaces it."""

    def load(self) -> list[T]:
        ...

    def save(self, records: Iterable[T]) -> None:
        ...


class InMemoryRepository(Generic[T]):
    def __init__(self, records: Iterable[T] = ()) -> None:
        self._records: list[T] = list(records)

    def load(self) -> list[T]:
        return list(self._records)

    def save(self, records: Iterable[T]) -> None:
        self._records = list(records)


class ProductionRecordRepository:
    """Stores production records as ``DailyProduction`` rows keyed by ``uid``."""

    def load(self) -> list[ProductionRecord]:
        try:
            rows = list(DailyProduction.objects.order_by("date", "aviary", "pk"))
        except DatabaseError:
            logger.exception("Falha ao carregar os registros de produção")
            return []
        return [_production_from_row(row) for row in rows]

    def save(self, records: Iterable[ProductionRecord]) -> None:
        records = list(records)
        with transaction.atomic():
            kept_uids = []
            for record in records:
                DailyProduction.objects.update_or_create(
                    uid=record.identifier,
                    defaults=_production_defaults(record),
                )
                kept_uids.append(record.identifier)
            removed, _ = DailyProduction.objects.exclude(uid__in=kept_uids).delete()
        logger.info("Registros de produção salvos: %s (removidos: %s)", len(records), removed)


class CharacterizationRepository:
    """Stores characterization snapshots as ``FlockCharacterization`` rows."""

    def load(self) -> list[CharacterizationSnapshot]:
        try:
            rows = list(FlockCharacterization.objects.order_by("date", "aviary", "pk"))
        except DatabaseError:
            logger.exception("Falha ao carregar as caracterizações de lote")
            return []
        return [_characterization_from_row(row) for row in rows]

    def save(self, snapshots: Iterable[CharacterizationSnapshot]) -> None:
        snapshots = list(snapshots)
        with transaction.atomic():
            kept_uids = []
            for snapshot in snapshots:
                FlockCharacterization.objects.update_or_create(
                    uid=snapshot.identifier,
                    defaults=_characterization_defaults(snapshot),
                )
                kept_uids.append(snapshot.identifier)
            removed, _ = FlockCharacterization.objects.exclude(uid__in=kept_uids).delete()
        logger.info("Caracterizações salvas: %s (removidas: %s)", len(snapshots), removed)


def _production_defaults(record: ProductionRecord) -> dict:
    return {
        "date": date.fromisoformat(record.date),
        "aviary": str(record.aviary),
        "batch_code": record.batch_id or "",
        "clean_eggs": record.clean,
        "dirty_eggs": record.dirty,
        "cracked_eggs": record.cracked,
        "floor_eggs": record.floor_eggs or 0,
        "birds": record.birds,
        "egg_weight": record.egg_weight,
        "bird_weight": record.bird_weight,
        "mortality": record.mortality,
        "observation": record.observation or "",
    }


def _production_from_row(row: DailyProduction) -> ProductionRecord:
    return ProductionRecord(
        identifier=row.uid,
        date=row.date.isoformat(),
        aviary=Aviary(row.aviary),
        batch_id=row.batch_code or None,
        clean=row.clean_eggs,
        dirty=row.dirty_eggs,
        cracked=row.cracked_eggs,
        floor_eggs=row.floor_eggs,
        birds=row.birds,
        egg_weight=row.egg_weight,
        bird_weight=row.bird_weight,
        mortality=row.mortality,
        observation=row.observation or None,
    )


def _characterization_defaults(snapshot: CharacterizationSnapshot) -> dict:
    return {
        "date": date.fromisoformat(snapshot.date),
        "aviary": str(snapshot.aviary),
        "batch_code": snapshot.batch_id,
        "week_age": snapshot.week_age,
        "batch_weight": snapshot.batch_weight,
        "uniformity": snapshot.uniformity,
        "feathering": str(snapshot.feathering),
    }


def _characterization_from_row(row: FlockCharacterization) -> CharacterizationSnapshot:
    return CharacterizationSnapshot(
        identifier=row.uid,
        date=row.date.isoformat(),
        aviary=Aviary(row.aviary),
        batch_id=row.batch_code,
        week_age=row.week_age,
        batch_weight=row.batch_weight,
        uniformity=row.uniformity,
        feathering=FeatheringQuality(row.feathering),
    )
