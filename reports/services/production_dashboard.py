from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, Optional, Sequence, Union

from django.conf import settings
from django.db import models

from production.models import Aviary
from production.services.derivation import snapshot_rank
from production.services.periods import (
    compare_fortnights,
    cutoff_date,
    format_month_label,
    fortnight_sort_key,
    weeks_between,
)
from production.services.records import CharacterizationSnapshot, ComputedRecord

logger = logging.getLogger(__name__)


class TimeWindow(models.TextChoices):
    LAST_7_DAYS = "7d", "Últimos 7 Dias"
    LAST_30_DAYS = "30d", "Últimos 30 Dias"
    THIS_MONTH = "this_month", "Mês Atual"
    THIS_YEAR = "this_year", "Ano Atual"
    ALL = "all", "Todo o Período"


class RateMetric(models.TextChoices):
    LAYING_RATE = "laying_rate", "Taxa de postura"
    DIRTY = "dirty", "Ovos sujos"
    CRACKED = "cracked", "Ovos trincados"
    FLOOR_EGGS = "floor_eggs", "Ovos de cama"
    MORTALITY = "mortality", "Mortalidade"


class RateLevel(models.TextChoices):
    NONE = "none", "Sem dados"
    GOOD = "good", "Adequado"
    WARNING = "warning", "Atenção"
    CRITICAL = "critical", "Crítico"


@dataclass(frozen=True)
class RateThreshold:
    warning: float
    critical: float
    higher_is_better: bool = False


DEFAULT_RATE_THRESHOLDS: dict[str, RateThreshold] = {
    RateMetric.LAYING_RATE: RateThreshold(warning=0.85, critical=0.70, higher_is_better=True),
    RateMetric.DIRTY: RateThreshold(warning=0.10, critical=0.15),
    RateMetric.CRACKED: RateThreshold(warning=0.10, critical=0.15),
    RateMetric.FLOOR_EGGS: RateThreshold(warning=0.02, critical=0.05),
    # Mortality is classified on the daily count, not on a share.
    RateMetric.MORTALITY: RateThreshold(warning=0, critical=5),
}


@dataclass(frozen=True)
class ProductionFilter:
    time: str = TimeWindow.LAST_7_DAYS
    aviary: Optional[str] = None
    fortnight: Optional[str] = None
    year: Optional[int] = None
    batch_id: Optional[str] = None

    def describe(self) -> str:
        """Human readable summary used as the header of exported reports."""
        aviary_labels = dict(Aviary.choices)
        parts = [f"Aviário: {aviary_labels.get(self.aviary, self.aviary) if self.aviary else 'Todos'}"]
        if self.batch_id:
            parts.append(f"Lote: {self.batch_id}")
        if self.fortnight:
            parts.append(f"Período: {self.fortnight}")
        elif self.year:
            parts.append(f"Período: Ano {self.year}")
        else:
            parts.append(f"Período: {dict(TimeWindow.choices).get(self.time, self.time)}")
        return " | ".join(parts)


@dataclass(frozen=True)
class ProductionSummary:
    record_count: int
    total_eggs: int
    total_clean: int
    total_dirty: int
    total_cracked: int
    total_floor_eggs: int
    total_mortality: int
    live_birds: int
    average_laying_rate: Optional[float]
    mortality_rate: Optional[float]
    average_egg_weight: Optional[float]
    average_bird_weight: Optional[float]
    perc_clean: Optional[float]
    perc_dirty: Optional[float]
    perc_cracked: Optional[float]
    perc_floor_eggs: Optional[float]


@dataclass(frozen=True)
class MonthlyProduction:
    month: str
    label: str
    total_eggs: int
    laying_rate: Optional[float]


@dataclass(frozen=True)
class FortnightSummary:
    fortnight: str
    total_eggs: int
    laying_rate: Optional[float]
    aviary_totals: dict[str, int]
    aviary_rates: dict[str, Optional[float]]


@dataclass(frozen=True)
class BatchCurvePoint:
    age_weeks: int
    rates: dict[str, float]


ReferenceDate = Union[str, date, None]


def filter_records(
    records: Iterable[ComputedRecord],
    production_filter: ProductionFilter,
    reference: ReferenceDate = None,
) -> list[ComputedRecord]:
    """Apply the aviary/batch filters and then a single period restriction.

    The period comes from the fortnight when one is selected, otherwise from
    the year, otherwise from the rolling time window.
    """
    result = list(records)
    if production_filter.aviary:
        result = [record for record in result if record.aviary == production_filter.aviary]
    if production_filter.batch_id:
        result = [record for record in result if record.batch_id == production_filter.batch_id]

    if production_filter.fortnight:
        return [
            record
            for record in result
            if compare_fortnights(record.fortnight, production_filter.fortnight) == 0
        ]
    if production_filter.year:
        year = int(production_filter.year)
        return [record for record in result if record.year == year]

    window = production_filter.time
    if window == TimeWindow.LAST_7_DAYS:
        cutoff = cutoff_date(7, reference)
        return [record for record in result if record.date >= cutoff]
    if window == TimeWindow.LAST_30_DAYS:
        cutoff = cutoff_date(30, reference)
        return [record for record in result if record.date >= cutoff]
    # Zero days back is the reference day itself.
    current_day = cutoff_date(0, reference)
    if window == TimeWindow.THIS_MONTH:
        return [record for record in result if record.date.startswith(current_day[:7])]
    if window == TimeWindow.THIS_YEAR:
        return [record for record in result if record.date.startswith(current_day[:4])]
    return result


def _fortnight_order(label: str) -> tuple:
    return (fortnight_sort_key(label), label)


def available_fortnights(records: Iterable[ComputedRecord]) -> list[str]:
    return sorted({record.fortnight for record in records}, key=_fortnight_order, reverse=True)


def available_years(records: Iterable[ComputedRecord]) -> list[int]:
    return sorted({record.year for record in records}, reverse=True)


def available_batches(records: Iterable[ComputedRecord]) -> list[str]:
    return sorted({record.batch_id for record in records if record.batch_id})


def _mean(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [value for value in values if value is not None]
    if not present:
        return None
    return sum(present) / len(present)


def _share(part: int, whole: int) -> Optional[float]:
    return part / whole if whole > 0 else None


def current_birds_by_aviary(records: Iterable[ComputedRecord]) -> dict[str, int]:
    """Birds reported by the latest record of each aviary."""
    latest: dict[str, ComputedRecord] = {}
    for record in records:
        current = latest.get(record.aviary)
        if current is None or (record.date, record.identifier) > (current.date, current.identifier):
            latest[record.aviary] = record
    return {aviary: record.birds for aviary, record in latest.items()}


def summarize_records(records: Iterable[ComputedRecord]) -> ProductionSummary:
    records = list(records)
    total_eggs = sum(record.total_eggs for record in records)
    total_mortality = sum(record.mortality for record in records)
    live_birds = sum(current_birds_by_aviary(records).values())
    total_clean = sum(record.clean for record in records)
    total_dirty = sum(record.dirty for record in records)
    total_cracked = sum(record.cracked for record in records)
    total_floor_eggs = sum(record.floor_eggs for record in records)

    return ProductionSummary(
        record_count=len(records),
        total_eggs=total_eggs,
        total_clean=total_clean,
        total_dirty=total_dirty,
        total_cracked=total_cracked,
        total_floor_eggs=total_floor_eggs,
        total_mortality=total_mortality,
        live_birds=live_birds,
        average_laying_rate=_mean(record.laying_rate for record in records),
        # Deaths over the population they came from (live + dead).
        mortality_rate=_share(total_mortality, live_birds + total_mortality),
        average_egg_weight=_mean(record.egg_weight for record in records),
        average_bird_weight=_mean(record.bird_weight for record in records),
        perc_clean=_share(total_clean, total_eggs),
        perc_dirty=_share(total_dirty, total_eggs),
        perc_cracked=_share(total_cracked, total_eggs),
        perc_floor_eggs=_share(total_floor_eggs, total_eggs),
    )


def aviary_summaries(records: Iterable[ComputedRecord]) -> dict[str, ProductionSummary]:
    grouped: dict[str, list[ComputedRecord]] = {aviary: [] for aviary in Aviary.values}
    for record in records:
        grouped.setdefault(record.aviary, []).append(record)
    return {aviary: summarize_records(items) for aviary, items in grouped.items()}


def monthly_production(records: Iterable[ComputedRecord]) -> list[MonthlyProduction]:
    grouped: dict[str, list[ComputedRecord]] = defaultdict(list)
    for record in records:
        grouped[record.month].append(record)
    return [
        MonthlyProduction(
            month=month,
            label=format_month_label(month),
            total_eggs=sum(record.total_eggs for record in items),
            laying_rate=_mean(record.laying_rate for record in items),
        )
        for month, items in sorted(grouped.items())
    ]


def fortnight_report(records: Iterable[ComputedRecord]) -> list[FortnightSummary]:
    """One row per fortnight, newest first, with per-aviary breakdown."""
    grouped: dict[str, list[ComputedRecord]] = defaultdict(list)
    for record in records:
        grouped[record.fortnight].append(record)

    rows: list[FortnightSummary] = []
    for fortnight in sorted(grouped, key=_fortnight_order, reverse=True):
        items = grouped[fortnight]
        aviary_totals = {aviary: 0 for aviary in Aviary.values}
        aviary_rates: dict[str, list[Optional[float]]] = {aviary: [] for aviary in Aviary.values}
        for record in items:
            aviary_totals[record.aviary] = aviary_totals.get(record.aviary, 0) + record.total_eggs
            aviary_rates.setdefault(record.aviary, []).append(record.laying_rate)
        rows.append(
            FortnightSummary(
                fortnight=fortnight,
                total_eggs=sum(record.total_eggs for record in items),
                laying_rate=_mean(record.laying_rate for record in items),
                aviary_totals=aviary_totals,
                aviary_rates={aviary: _mean(rates) for aviary, rates in aviary_rates.items()},
            )
        )
    return rows


def _reference_snapshot(
    snapshots: Sequence[CharacterizationSnapshot],
    record_date: str,
) -> Optional[CharacterizationSnapshot]:
    candidates = [snapshot for snapshot in snapshots if snapshot.date <= record_date]
    if not candidates:
        return None
    return max(candidates, key=snapshot_rank)


def batch_laying_curve(
    records: Iterable[ComputedRecord],
    snapshots: Iterable[CharacterizationSnapshot],
) -> list[BatchCurvePoint]:
    """Laying rate (percent) per batch against flock age in weeks.

    The age of a record is the week age of the latest characterization of
    its batch taken on or before the record, plus the whole weeks since.
    """
    snapshots_by_batch: dict[str, list[CharacterizationSnapshot]] = defaultdict(list)
    for snapshot in snapshots:
        snapshots_by_batch[snapshot.batch_id].append(snapshot)

    buckets: dict[int, dict[str, list[float]]] = defaultdict(lambda: defaultdict(list))
    for record in records:
        if not record.batch_id or record.laying_rate is None:
            continue
        reference = _reference_snapshot(snapshots_by_batch.get(record.batch_id, ()), record.date)
        if reference is None:
            continue
        age = reference.week_age + weeks_between(reference.date, record.date)
        buckets[age][record.batch_id].append(record.laying_rate * 100)

    return [
        BatchCurvePoint(
            age_weeks=age,
            rates={
                batch_id: round(sum(values) / len(values), 1)
                for batch_id, values in sorted(per_batch.items())
            },
        )
        for age, per_batch in sorted(buckets.items())
    ]


def rate_thresholds() -> dict[str, RateThreshold]:
    """Default thresholds merged with ``AVIARIO_RATE_THRESHOLDS`` overrides."""
    thresholds = dict(DEFAULT_RATE_THRESHOLDS)
    overrides = getattr(settings, "AVIARIO_RATE_THRESHOLDS", None) or {}
    for metric, values in overrides.items():
        base = thresholds.get(metric)
        if base is None:
            logger.warning("Limite de taxa ignorado para métrica desconhecida: %s", metric)
            continue
        changes = {key: float(values[key]) for key in ("warning", "critical") if key in values}
        thresholds[metric] = replace(base, **changes)
    return thresholds


def classify_rate(rate: Optional[float], metric: str) -> RateLevel:
    threshold = rate_thresholds()[RateMetric(metric)]
    if rate is None:
        return RateLevel.NONE
    if threshold.higher_is_better:
        if rate < threshold.critical:
            return RateLevel.CRITICAL
        if rate < threshold.warning:
            return RateLevel.WARNING
        return RateLevel.GOOD
    if rate > threshold.critical:
        return RateLevel.CRITICAL
    if rate > threshold.warning:
        return RateLevel.WARNING
    return RateLevel.GOOD


def records_with_observations(records: Iterable[ComputedRecord]) -> list[ComputedRecord]:
    return [record for record in records if record.observation and record.observation.strip()]
