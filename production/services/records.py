from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

from production.models import Aviary, FeatheringQuality


def new_identifier() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class ProductionRecord:
    """Raw daily production entry for one aviary."""

    identifier: str
    date: str
    aviary: Aviary
    clean: int = 0
    dirty: int = 0
    cracked: int = 0
    floor_eggs: int = 0
    birds: int = 0
    mortality: int = 0
    batch_id: Optional[str] = None
    egg_weight: Optional[float] = None
    bird_weight: Optional[float] = None
    observation: Optional[str] = None


@dataclass(frozen=True)
class CharacterizationSnapshot:
    """Point-in-time flock assessment; links production days to a batch."""

    identifier: str
    date: str
    aviary: Aviary
    batch_id: str
    week_age: int
    batch_weight: float
    uniformity: float
    feathering: FeatheringQuality = FeatheringQuality.GOOD


@dataclass(frozen=True)
class ComputedRecord:
    record: ProductionRecord
    batch_id: Optional[str]
    total_eggs: int
    perc_clean: Optional[float]
    perc_dirty: Optional[float]
    perc_cracked: Optional[float]
    perc_floor_eggs: Optional[float]
    laying_rate: Optional[float]
    fortnight: str
    month: str
    year: int

    @property
    def identifier(self) -> str:
        return self.record.identifier

    @property
    def date(self) -> str:
        return self.record.date

    @property
    def aviary(self) -> Aviary:
        return self.record.aviary

    @property
    def clean(self) -> int:
        return self.record.clean

    @property
    def dirty(self) -> int:
        return self.record.dirty

    @property
    def cracked(self) -> int:
        return self.record.cracked

    @property
    def floor_eggs(self) -> int:
        return self.record.floor_eggs or 0

    @property
    def birds(self) -> int:
        return self.record.birds

    @property
    def mortality(self) -> int:
        return self.record.mortality

    @property
    def egg_weight(self) -> Optional[float]:
        return self.record.egg_weight

    @property
    def bird_weight(self) -> Optional[float]:
        return self.record.bird_weight

    @property
    def observation(self) -> Optional[str]:
        return self.record.observation
