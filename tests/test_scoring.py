import random
from types import SimpleNamespace

import pytest

from agrihealth import scoring
from agrihealth.scoring import (
    IMAGE_CONFIDENCE_RANGE,
    SYMPTOM_CONFIDENCE_RANGE,
    RandomPlaceholderBackend,
    best_candidate,
    count_matches,
    draw_confidence,
    match_symptoms,
)


def entry(name, symptoms):
    return SimpleNamespace(id=name.lower(), name=name, symptoms=symptoms)


def test_count_matches_is_exact_string_equality():
    assert count_matches(["Fever", "lameness"], ["Fever", "Lameness"]) == 1
    assert count_matches([" Fever"], ["Fever"]) == 0
    # duplicates on either side count once
    assert count_matches(["Fever", "Fever"], ["Fever", "Fever"]) == 1


def test_best_candidate_prefers_highest_overlap():
    a = entry("Alpha", ["x", "y"])
    b = entry("Beta", ["x", "y", "z"])
    best = best_candidate([a, b], ["x", "y", "z"])
    assert best == (b, 3)


def test_best_candidate_tie_keeps_first_in_order():
    a = entry("Alpha", ["x", "q"])
    b = entry("Beta", ["x", "r"])
    assert best_candidate([a, b], ["x"])[0] is a
    assert best_candidate([b, a], ["x"])[0] is b


def test_best_candidate_zero_overlap_is_no_match():
    assert best_candidate([entry("Alpha", ["x"])], ["y"]) is None
    assert best_candidate([], ["y"]) is None


def test_best_candidate_min_zero_accepts_any_candidate():
    a = entry("Alpha", ["x"])
    assert best_candidate([a, entry("Beta", ["z"])], ["y"], min_matches=0) == (a, 0)
    assert best_candidate([], ["y"], min_matches=0) is None


def test_adding_a_winning_symptom_never_lowers_its_rank():
    a = entry("Alpha", ["x", "y", "w"])
    b = entry("Beta", ["x", "z"])
    observed = {"x", "z"}
    assert best_candidate([a, b], observed)[0] is b
    observed.add("y")
    observed.add("w")
    assert best_candidate([a, b], observed)[0] is a


@pytest.mark.parametrize("bounds", [SYMPTOM_CONFIDENCE_RANGE, IMAGE_CONFIDENCE_RANGE])
def test_draw_confidence_within_bounds(bounds):
    rng = random.Random(1)
    for _ in range(200):
        value = draw_confidence(bounds, rng)
        assert bounds[0] <= value <= bounds[1]
        assert value == round(value, 2)


def test_random_placeholder_backend_picks_a_candidate():
    candidates = [entry("Alpha", []), entry("Beta", [])]
    backend = RandomPlaceholderBackend(random.Random(3))
    match = backend.identify(candidates, "/static/images/x.jpg")
    assert match.disease in candidates
    assert IMAGE_CONFIDENCE_RANGE[0] <= match.confidence <= IMAGE_CONFIDENCE_RANGE[1]
    assert backend.identify([], "/static/images/x.jpg") is None


def test_match_symptoms_against_catalog(db):
    match = match_symptoms(
        db, "plant", "tomato",
        ["Dark brown spots on leaves", "White fungal growth on undersides of leaves"],
    )
    assert match.disease.name == "Late Blight"
    assert match.match_count == 2
    assert 0.6 <= match.confidence <= 1.0


def test_match_symptoms_species_is_case_sensitive(db):
    assert match_symptoms(db, "plant", "Tomato", ["Dark brown spots on leaves"]) is None


def test_match_symptoms_uses_configured_threshold(db, monkeypatch):
    monkeypatch.setattr(scoring.config, "MIN_SYMPTOM_MATCHES", 0)
    match = match_symptoms(db, "livestock", "pig", ["Something unrelated"])
    assert match.disease.name == "African Swine Fever"
    assert match.match_count == 0
