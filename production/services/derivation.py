from __future__ import annotations

from typing import Iterable, Optional

from production.services.periods import fortnight_of
from production.services.records import CharacterizationSnapshot, ComputedRecord, ProductionRecord


def _ratio(numerator: float, denominator: float) -> Optional[float]:
    # Zero denominators stay None: "no data" must not read as 0 %.
    if denominator > 0:
        return numerator / denominator
    return None


def snapshot_rank(snapshot: CharacterizationSnapshot) -> tuple[str, str, str]:
    return (snapshot.date, snapshot.batch_id or "", snapshot.identifier or "")


def active_snapshot(
    aviary: str,
    record_date: str,
    snapshots: Iterable[CharacterizationSnapshot],
) -> Optional[CharacterizationSnapshot]:
    """Latest snapshot of ``aviary`` taken on or before ``record_date``.

    Snapshots sharing the latest date are ranked by batch id and then by
    identifier, so the winner never depends on the input order.
    """
    best: Optional[CharacterizationSnapshot] = None
    for snapshot in snapshots:
        if snapshot.aviary != aviary or snapshot.date > record_date:
            continue
        if best is None or snapshot_rank(snapshot) > snapshot_rank(best):
            best = snapshot
    return best


def resolve_batch(
    aviary: str,
    record_date: str,
    snapshots: Iterable[CharacterizationSnapshot],
) -> Optional[str]:
    snapshot = active_snapshot(aviary, record_date, snapshots)
    return snapshot.batch_id if snapshot else None


def derive_record(
    record: ProductionRecord,
    snapshots: Iterable[CharacterizationSnapshot] = (),
) -> ComputedRecord:
    """Compute totals, shares, laying rate, period labels and the effective batch."""
    floor_eggs = record.floor_eggs or 0
    total_eggs = record.clean + record.dirty + record.cracked + floor_eggs

    return ComputedRecord(
        record=record,
        batch_id=resolve_batch(record.aviary, record.date, snapshots),
        total_eggs=total_eggs,
        perc_clean=_ratio(record.clean, total_eggs),
        perc_dirty=_ratio(record.dirty, total_eggs),
        perc_cracked=_ratio(record.cracked, total_eggs),
        perc_floor_eggs=_ratio(floor_eggs, total_eggs),
        laying_rate=_ratio(total_eggs, record.birds),
        fortnight=fortnight_of(record.date),
        month=record.date[:7],
        year=int(record.date[:4]),
    )


def derive_records(
    records: Iterable[ProductionRecord],
    snapshots: Iterable[CharacterizationSnapshot] = (),
) -> list[ComputedRecord]:
    """Derive every record, newest first."""
    snapshot_list = list(snapshots)
    computed = [derive_record(record, snapshot_list) for record in records]
    computed.sort(key=lambda item: (item.date, item.identifier), reverse=True)
    return computed


def sort_snapshots(snapshots: Iterable[CharacterizationSnapshot]) -> list[CharacterizationSnapshot]:
    return sorted(snapshots, key=snapshot_rank, reverse=True)
