"""
Disease identification for diagnosis requests.

Two paths pick a catalog entry for a species:

- symptom overlap (`match_symptoms`): the entry sharing the most observed
  symptoms wins, ties going to the first entry in name order;
- image identification (`ScorerBackend`): a pluggable strategy. The only
  implementation today is `RandomPlaceholderBackend`, which stands in for a
  vision model by picking a random entry for the species.

Confidence values on both paths are synthetic placeholders, not probabilities.
"""
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from . import catalog, config
from .catalog import DiseaseEntry

SYMPTOM_CONFIDENCE_RANGE = (0.6, 1.0)
IMAGE_CONFIDENCE_RANGE = (0.7, 1.0)


@dataclass
class Match:
    disease: DiseaseEntry
    confidence: float
    match_count: Optional[int] = None


def draw_confidence(bounds: Tuple[float, float], rng: Optional[random.Random] = None) -> float:
    low, high = bounds
    value = (rng or random).uniform(low, high)
    return round(max(low, min(high, value)), 2)


def count_matches(observed: Iterable[str], symptoms: Iterable[str]) -> int:
    # Exact string equality: no trimming, no case folding
    return len(set(observed) & set(symptoms or []))


def best_candidate(
    candidates: Sequence[DiseaseEntry],
    observed: Iterable[str],
    min_matches: int = 1,
) -> Optional[Tuple[DiseaseEntry, int]]:
    """Return (entry, match_count) with the strictly greatest overlap, or None.

    Ties keep the earlier candidate. Entries scoring below `min_matches` never
    qualify; with `min_matches=0` any candidate beats no candidate.
    """
    observed = set(observed)
    best: Optional[Tuple[DiseaseEntry, int]] = None
    for candidate in candidates:
        score = count_matches(observed, candidate.symptoms)
        if score < min_matches:
            continue
        if best is None or score > best[1]:
            best = (candidate, score)
    return best


def match_symptoms(
    db: Session,
    type_: str,
    species_key: str,
    observed: Iterable[str],
    min_matches: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> Optional[Match]:
    """Best symptom match for the species, or None when nothing qualifies."""
    if min_matches is None:
        min_matches = config.MIN_SYMPTOM_MATCHES
    candidates = catalog.list_by_species(db, type_, species_key)
    best = best_candidate(candidates, observed, min_matches=min_matches)
    if best is None:
        return None
    disease, score = best
    return Match(disease=disease, confidence=draw_confidence(SYMPTOM_CONFIDENCE_RANGE, rng), match_count=score)


class ScorerBackend(ABC):
    """Identifies a disease from an uploaded image.

    A real model plugs in here: it receives the species' catalog entries and
    the stored image reference and returns a Match or None.
    """

    @abstractmethod
    def identify(self, candidates: Sequence[DiseaseEntry], image_url: str) -> Optional[Match]:
        raise NotImplementedError


class RandomPlaceholderBackend(ScorerBackend):
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def identify(self, candidates: Sequence[DiseaseEntry], image_url: str) -> Optional[Match]:
        if not candidates:
            return None
        disease = self.rng.choice(list(candidates))
        return Match(disease=disease, confidence=draw_confidence(IMAGE_CONFIDENCE_RANGE, self.rng))


_default_backend: ScorerBackend = RandomPlaceholderBackend()


def get_scorer_backend() -> ScorerBackend:
    return _default_backend
