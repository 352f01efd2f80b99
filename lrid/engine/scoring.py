# lrid/engine/scoring.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Optional

from .instrument import Bands, Instrument

NO_DATA_SCORE = 0.0


def round_score(value: float, places: int = 2) -> float:
    """Half-up rounding on the decimal form, so 3.125 -> 3.13."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass
class DimensionScore:
    dimension_id: str
    name: str
    score: float
    band: str
    item_count: int

    @property
    def has_data(self) -> bool:
        return self.item_count > 0


@dataclass
class AggregateScore:
    index_id: str
    name: str
    score: Optional[float]  # None when no constituent has data
    band: Optional[str]
    dimensions_used: List[str] = field(default_factory=list)
    dimensions_excluded: List[str] = field(default_factory=list)


def band_for(score: float, bands: Bands) -> str:
    return bands.classify(score)


def score_dimensions(
    instrument: Instrument, valid_answers: Mapping[str, Any]
) -> tuple[Dict[str, DimensionScore], List[str]]:
    """
    Mean of valid scale answers per dimension, rounded to 2 dp.
    Every instrument dimension gets an entry; dimensions without items get the
    0.0 sentinel plus a warning.
    """
    scores: Dict[str, DimensionScore] = {}
    warnings: List[str] = []

    for dim in instrument.dimensions:
        values = [
            valid_answers[q.id]
            for q in instrument.questions_for(dim.id)
            if q.type == "scale" and q.id in valid_answers
        ]
        if values:
            score = round_score(sum(values) / len(values))
        else:
            score = NO_DATA_SCORE
            warnings.append(f"No items for dimension {dim.id} ({dim.name})")

        scores[dim.id] = DimensionScore(
            dimension_id=dim.id,
            name=dim.name,
            score=score,
            band=band_for(score, instrument.bands),
            item_count=len(values),
        )

    return scores, warnings


def compute_aggregates(
    instrument: Instrument, dimension_scores: Mapping[str, DimensionScore]
) -> Dict[str, AggregateScore]:
    """
    Composite = mean of constituent dimension scores, skipping no-data
    dimensions. All constituents empty -> score and band are None.
    """
    out: Dict[str, AggregateScore] = {}
    for agg in instrument.aggregates:
        used: List[str] = []
        excluded: List[str] = []
        values: List[float] = []
        for dim_id in agg.dimensions:
            ds = dimension_scores.get(dim_id)
            if ds is None or not ds.has_data:
                excluded.append(dim_id)
                continue
            used.append(dim_id)
            values.append(ds.score)

        if values:
            score = round_score(sum(values) / len(values))
            band = band_for(score, instrument.bands)
        else:
            score = None
            band = None

        out[agg.id] = AggregateScore(
            index_id=agg.id,
            name=agg.name or agg.id,
            score=score,
            band=band,
            dimensions_used=used,
            dimensions_excluded=excluded,
        )
    return out
