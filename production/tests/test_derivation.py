from __future__ import annotations

from django.test import SimpleTestCase

from production.models import Aviary
from production.services.derivation import (
    active_snapshot,
    derive_record,
    derive_records,
    resolve_batch,
    sort_snapshots,
)
from production.services.records import CharacterizationSnapshot, ProductionRecord


def _snapshot(identifier: str, snapshot_date: str, batch_id: str, aviary: Aviary = Aviary.A1) -> CharacterizationSnapshot:
    return CharacterizationSnapshot(
        identifier=identifier,
        date=snapshot_date,
        aviary=aviary,
        batch_id=batch_id,
        week_age=20,
        batch_weight=1500.0,
        uniformity=85.0,
    )


class DerivedMetricsTests(SimpleTestCase):
    def test_totals_shares_and_laying_rate(self) -> None:
        record = ProductionRecord(
            identifier="rec-1",
            date="2024-03-10",
            aviary=Aviary.A2,
            clean=900,
            dirty=30,
            cracked=10,
            floor_eggs=5,
            birds=1000,
            observation="Bebedouro trocado",
        )

        computed = derive_record(record)

        self.assertEqual(computed.total_eggs, 945)
        self.assertAlmostEqual(computed.laying_rate, 0.945)
        self.assertAlmostEqual(computed.perc_clean, 900 / 945)
        shares = [computed.perc_clean, computed.perc_dirty, computed.perc_cracked, computed.perc_floor_eggs]
        for share in shares:
            self.assertTrue(0 <= share <= 1)
        self.assertAlmostEqual(sum(shares), 1.0)
        self.assertEqual(computed.fortnight, "Mar/2024 - 1ª Quinzena")
        self.assertEqual(computed.month, "2024-03")
        self.assertEqual(computed.year, 2024)
        self.assertEqual(computed.observation, "Bebedouro trocado")
        self.assertEqual(computed.floor_eggs, 5)

    def test_zero_denominators_produce_none(self) -> None:
        computed = derive_record(ProductionRecord(identifier="rec-2", date="2024-03-10", aviary=Aviary.A1))

        self.assertEqual(computed.total_eggs, 0)
        self.assertIsNone(computed.perc_clean)
        self.assertIsNone(computed.perc_dirty)
        self.assertIsNone(computed.perc_cracked)
        self.assertIsNone(computed.perc_floor_eggs)
        self.assertIsNone(computed.laying_rate)

    def test_eggs_without_birds_have_no_laying_rate(self) -> None:
        computed = derive_record(
            ProductionRecord(identifier="rec-3", date="2024-03-10", aviary=Aviary.A1, clean=10)
        )

        self.assertEqual(computed.perc_clean, 1.0)
        self.assertIsNone(computed.laying_rate)

    def test_derivation_is_idempotent_and_does_not_touch_inputs(self) -> None:
        record = ProductionRecord(
            identifier="rec-4", date="2024-03-10", aviary=Aviary.A1, clean=80, birds=100, batch_id="OLD"
        )
        snapshots = [_snapshot("s-1", "2024-03-01", "L2")]

        first = derive_record(record, snapshots)
        second = derive_record(record, snapshots)

        self.assertEqual(first, second)
        self.assertEqual(record.batch_id, "OLD")
        self.assertEqual(len(snapshots), 1)


class BatchResolutionTests(SimpleTestCase):
    snapshots = [
        _snapshot("s-1", "2024-01-01", "L1"),
        _snapshot("s-2", "2024-03-01", "L2"),
        _snapshot("s-3", "2024-03-05", "X9", aviary=Aviary.A3),
    ]

    def test_latest_snapshot_on_or_before_the_record_wins(self) -> None:
        self.assertEqual(resolve_batch(Aviary.A1, "2024-03-10", self.snapshots), "L2")
        self.assertEqual(resolve_batch(Aviary.A1, "2024-03-01", self.snapshots), "L2")
        self.assertEqual(resolve_batch(Aviary.A1, "2024-02-29", self.snapshots), "L1")

    def test_records_before_any_snapshot_have_no_batch(self) -> None:
        record = ProductionRecord(
            identifier="rec-5", date="2023-12-01", aviary=Aviary.A1, batch_id="TYPED", birds=10
        )

        self.assertIsNone(derive_record(record, self.snapshots).batch_id)

    def test_resolved_batch_overrides_stored_batch(self) -> None:
        record = ProductionRecord(
            identifier="rec-6", date="2024-03-10", aviary=Aviary.A1, batch_id="TYPED", birds=10
        )

        self.assertEqual(derive_record(record, self.snapshots).batch_id, "L2")

    def test_snapshots_of_other_aviaries_are_ignored(self) -> None:
        self.assertIsNone(resolve_batch(Aviary.A4, "2024-03-10", self.snapshots))
        self.assertEqual(resolve_batch(Aviary.A3, "2024-03-10", self.snapshots), "X9")

    def test_same_day_snapshots_resolve_to_greatest_batch_regardless_of_order(self) -> None:
        tied = [_snapshot("s-a", "2024-03-01", "L3"), _snapshot("s-b", "2024-03-01", "L10")]

        self.assertEqual(resolve_batch(Aviary.A1, "2024-03-10", tied), "L3")
        self.assertEqual(resolve_batch(Aviary.A1, "2024-03-10", list(reversed(tied))), "L3")

    def test_identifier_breaks_remaining_ties(self) -> None:
        tied = [_snapshot("s-a", "2024-03-01", "L1"), _snapshot("s-b", "2024-03-01", "L1")]

        self.assertEqual(active_snapshot(Aviary.A1, "2024-03-10", tied).identifier, "s-b")
        self.assertEqual(active_snapshot(Aviary.A1, "2024-03-10", tied[::-1]).identifier, "s-b")


class DeriveRecordsTests(SimpleTestCase):
    def test_results_are_sorted_newest_first(self) -> None:
        records = [
            ProductionRecord(identifier="a", date="2024-03-01", aviary=Aviary.A1),
            ProductionRecord(identifier="b", date="2024-03-03", aviary=Aviary.A1),
            ProductionRecord(identifier="c", date="2024-03-02", aviary=Aviary.A2),
        ]

        computed = derive_records(records)

        self.assertEqual([item.identifier for item in computed], ["b", "c", "a"])

    def test_snapshots_are_listed_newest_first(self) -> None:
        ordered = sort_snapshots(
            [_snapshot("s-1", "2024-01-01", "L1"), _snapshot("s-2", "2024-03-01", "L2")]
        )

        self.assertEqual([snapshot.identifier for snapshot in ordered], ["s-2", "s-1"])
