"""
Bonus Tier Policy

Maps a total performance score (0-100) to a bonus percentage, a tier label
and a display color. The mapping is a table of score bands; inside a band
the bonus is interpolated linearly between the band's minimum and maximum
bonus. Top tiers are deliberately narrow, so the curve gets steeper as the
score rises.

The table is validated when it is loaded:
- bands are ordered by ``min_score`` and the first one starts at 0
- the last band reaches 100
- bonus never decreases from one band to the next
"""
import json
import logging
import math
from functools import lru_cache
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError, model_validator

from perfpay.core.config import settings
from perfpay.core.exceptions import ValidationFailure

logger = logging.getLogger(__name__)


class TierBand(BaseModel):
    min_score: float = Field(ge=0, le=100)
    max_score: float = Field(ge=0, le=100)
    min_bonus: float = Field(ge=0)
    max_bonus: float = Field(ge=0)
    tier: str
    color: str

    @model_validator(mode="after")
    def check_ranges(self):
        if self.max_score < self.min_score:
            raise ValueError(f"Tier '{self.tier}': max_score below min_score")
        if self.max_bonus < self.min_bonus:
            raise ValueError(f"Tier '{self.tier}': max_bonus below min_bonus")
        return self


class TierResult(BaseModel):
    bonus_percentage: float
    tier: str
    tier_color: str


DEFAULT_BANDS = [
    TierBand(min_score=0, max_score=30, min_bonus=25, max_bonus=25, tier="Minimum", color="#ef4444"),
    TierBand(min_score=31, max_score=50, min_bonus=26, max_bonus=75, tier="Below Average", color="#f97316"),
    TierBand(min_score=51, max_score=65, min_bonus=76, max_bonus=100, tier="Average", color="#eab308"),
    TierBand(min_score=66, max_score=78, min_bonus=101, max_bonus=125, tier="Good", color="#84cc16"),
    TierBand(min_score=79, max_score=87, min_bonus=126, max_bonus=150, tier="Very Good", color="#22c55e"),
    TierBand(min_score=88, max_score=93, min_bonus=151, max_bonus=175, tier="Excellent", color="#06b6d4"),
    TierBand(min_score=94, max_score=97, min_bonus=176, max_bonus=200, tier="Outstanding", color="#8b5cf6"),
    TierBand(min_score=98, max_score=100, min_bonus=201, max_bonus=225, tier="Exceptional", color="#ec4899"),
]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class TierPolicy:
    def __init__(self, bands: Sequence[TierBand]):
        self.bands: List[TierBand] = sorted(bands, key=lambda b: b.min_score)
        self._validate()

    def _validate(self):
        if not self.bands:
            raise ValidationFailure("Tier policy needs at least one band")
        if self.bands[0].min_score != 0:
            raise ValidationFailure("First tier band must start at score 0")
        if self.bands[-1].max_score != 100:
            raise ValidationFailure("Last tier band must reach score 100")
        for lower, upper in zip(self.bands, self.bands[1:]):
            if upper.min_score <= lower.min_score:
                raise ValidationFailure(
                    f"Tier bands '{lower.tier}' and '{upper.tier}' overlap"
                )
            if upper.min_bonus < lower.max_bonus:
                raise ValidationFailure(
                    f"Bonus must not decrease from '{lower.tier}' to '{upper.tier}'"
                )

    def band_for(self, score: float) -> TierBand:
        # Bands are half-open on the lower bound: a score belongs to the last
        # band whose min_score it reaches, so fractional scores between
        # integer breakpoints are never orphaned.
        selected = self.bands[0]
        for band in self.bands:
            if score >= band.min_score:
                selected = band
            else:
                break
        return selected

    def tier_for(self, total_score: float) -> TierResult:
        clamped = max(0.0, min(100.0, float(total_score)))
        band = self.band_for(clamped)

        score_range = band.max_score - band.min_score
        position = (clamped - band.min_score) / score_range if score_range > 0 else 0.0
        position = max(0.0, min(1.0, position))
        bonus = band.min_bonus + position * (band.max_bonus - band.min_bonus)

        return TierResult(
            bonus_percentage=_round_half_up(bonus),
            tier=band.tier,
            tier_color=band.color,
        )

    @classmethod
    def from_file(cls, path: str) -> "TierPolicy":
        with open(path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
        try:
            bands = [TierBand.model_validate(item) for item in raw]
        except ValidationError as e:
            raise ValidationFailure(f"Invalid tier policy file {path}", details={"errors": str(e)}) from e
        return cls(bands)


@lru_cache(maxsize=4)
def _load_policy(path: Optional[str]) -> TierPolicy:
    if path:
        logger.info(f"Loading tier policy from {path}")
        return TierPolicy.from_file(path)
    return TierPolicy(DEFAULT_BANDS)


def get_tier_policy() -> TierPolicy:
    return _load_policy(settings.tier_policy_path)


def tier_for(total_score: float) -> TierResult:
    """Tier lookup against the configured policy."""
    return get_tier_policy().tier_for(total_score)
