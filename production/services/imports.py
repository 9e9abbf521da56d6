from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Generic, Hashable, Iterable, TypeVar

from production.services.records import CharacterizationSnapshot, ProductionRecord, new_identifier

RecordT = TypeVar("RecordT", ProductionRecord, CharacterizationSnapshot)
KeyFunction = Callable[[RecordT], Hashable]


@dataclass
class ImportMergeResult(Generic[RecordT]):
    records: list[RecordT]
    created_count: int
    updated_count: int


def production_key(record: ProductionRecord) -> tuple[str, str]:
    return (record.date, str(record.aviary))


def characterization_key(snapshot: CharacterizationSnapshot) -> tuple[str, str, str]:
    return (snapshot.date, str(snapshot.aviary), snapshot.batch_id)


def reconcile_import(
    existing: Iterable[RecordT],
    incoming: Iterable[RecordT],
    key_of: KeyFunction,
) -> ImportMergeResult[RecordT]:
    """Upsert ``incoming`` into ``existing`` by natural key.

    A record whose key is already known replaces the stored content but keeps
    the stored identifier, so re-importing the same file never forks ids. A
    record for a new key whose identifier is already taken gets a fresh one.
    """
    by_key: dict[Hashable, RecordT] = {}
    for record in existing:
        by_key[key_of(record)] = record
    used_identifiers = {record.identifier for record in by_key.values()}

    created = updated = 0
    for record in incoming:
        key = key_of(record)
        current = by_key.get(key)
        if current is None:
            if record.identifier in used_identifiers:
                record = replace(record, identifier=new_identifier())
            by_key[key] = record
            used_identifiers.add(record.identifier)
            created += 1
        else:
            by_key[key] = replace(record, identifier=current.identifier)
            updated += 1

    return ImportMergeResult(records=list(by_key.values()), created_count=created, updated_count=updated)


def merge_import(
    existing: Iterable[RecordT],
    incoming: Iterable[RecordT],
    key_of: KeyFunction,
) -> list[RecordT]:
    return reconcile_import(existing, incoming, key_of).records
