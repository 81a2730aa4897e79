import os
import random

import pytest
from sqlalchemy.exc import SQLAlchemyError

from agrihealth import diagnosis as workflow
from agrihealth import models
from agrihealth.errors import NotFound, UpstreamError, ValidationError
from agrihealth.scoring import RandomPlaceholderBackend
from agrihealth.storage import ImageStore, ImageUpload

LATE_BLIGHT_SYMPTOMS = ["Dark brown spots on leaves", "White fungal growth on undersides of leaves"]


class FailingStore(ImageStore):
    def save(self, upload):
        raise UpstreamError("Error uploading image", detail="bucket unavailable")


def leaf_image():
    return ImageUpload(filename="leaf.jpg", content_type="image/jpeg", data=b"\xff\xd8\xff fake jpeg")


def submit(db, user, **kwargs):
    params = dict(type_="plant", species_name="tomato", symptoms=LATE_BLIGHT_SYMPTOMS)
    params.update(kwargs)
    return workflow.submit(db, user.id, **params)


def test_submit_without_image_stays_pending(db, farmer):
    d = submit(db, farmer, temperature=21.5, notes="north field", location="Plot 4")
    assert d.status == "pending"
    assert d.diagnosis_result is None and d.confidence is None
    assert d.symptoms == LATE_BLIGHT_SYMPTOMS
    assert d.location == "Plot 4"


@pytest.mark.parametrize("kwargs", [
    {"type_": None},
    {"species_name": ""},
    {"symptoms": []},
    {"symptoms": None},
])
def test_submit_requires_fields(db, farmer, kwargs):
    with pytest.raises(ValidationError):
        submit(db, farmer, **kwargs)


def test_submit_rejects_unknown_type(db, farmer):
    with pytest.raises(ValidationError):
        submit(db, farmer, type_="fish")


def test_submit_wraps_single_symptom(db, farmer):
    d = submit(db, farmer, symptoms="Yellow leaves")
    assert d.symptoms == ["Yellow leaves"]


def test_submit_with_image_completes(db, farmer, image_store):
    d = submit(db, farmer, image=leaf_image(), store=image_store,
               backend=RandomPlaceholderBackend(random.Random(0)))
    assert d.image_url.startswith("/static/images/")
    assert d.status == "completed"
    assert d.diagnosis_result == "Late Blight"
    assert 0.7 <= d.confidence <= 1.0
    assert d.disease_id is not None
    assert d.treatment_plan[0].startswith("Urgent")


def test_submit_with_image_unknown_species_stays_pending(db, farmer, image_store):
    d = submit(db, farmer, species_name="okra", image=leaf_image(), store=image_store,
               backend=RandomPlaceholderBackend())
    assert d.status == "pending"
    assert d.diagnosis_result is None


def test_submit_upload_failure_persists_nothing(db, farmer):
    with pytest.raises(UpstreamError):
        submit(db, farmer, image=leaf_image(), store=FailingStore())
    assert db.query(models.Diagnosis).count() == 0


def test_submit_removes_image_when_commit_fails(db, farmer, image_store, monkeypatch):
    def broken_commit():
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(db, "commit", broken_commit)
    with pytest.raises(SQLAlchemyError):
        submit(db, farmer, image=leaf_image(), store=image_store, backend=RandomPlaceholderBackend())
    assert os.listdir(image_store.directory) == []


def test_submit_image_uses_configured_store(db, farmer, image_store, monkeypatch):
    monkeypatch.setattr(workflow, "get_image_store", lambda: image_store)
    d = submit(db, farmer, image=leaf_image(), backend=RandomPlaceholderBackend())
    assert d.image_url.startswith("/static/images/")
    assert len(os.listdir(image_store.directory)) == 1


def test_submit_rejects_non_image(db, farmer, image_store):
    upload = ImageUpload(filename="notes.txt", content_type="text/plain", data=b"hello")
    with pytest.raises(ValidationError):
        submit(db, farmer, image=upload, store=image_store)


def test_update_symptoms_matches_late_blight(db, farmer):
    d = submit(db, farmer, symptoms=["Yellow leaves"])
    d = workflow.update_symptoms(db, d.id, farmer.id, LATE_BLIGHT_SYMPTOMS)
    assert d.status == "completed"
    assert d.diagnosis_result == "Late Blight"
    assert 0.6 <= d.confidence <= 1.0


def test_update_symptoms_without_overlap_goes_to_expert_review(db, farmer):
    d = submit(db, farmer)
    d = workflow.update_symptoms(db, d.id, farmer.id, LATE_BLIGHT_SYMPTOMS)
    assert d.status == "completed"

    d = workflow.update_symptoms(db, d.id, farmer.id, ["Yellow leaves"])
    assert d.status == "expert_review"
    assert d.diagnosis_result is None
    assert d.confidence is None
    assert d.disease_id is None
    assert d.treatment_plan is None


def test_update_symptoms_unknown_species_goes_to_expert_review(db, farmer):
    d = submit(db, farmer, type_="livestock", species_name="goat", symptoms=["Fever"])
    d = workflow.update_symptoms(db, d.id, farmer.id, ["Fever"])
    assert d.status == "expert_review"


def test_update_symptoms_is_idempotent(db, farmer):
    d = submit(db, farmer, type_="livestock", species_name="cattle", symptoms=["Fever"])
    first = workflow.update_symptoms(db, d.id, farmer.id, ["Fever", "Lameness"])
    result, status = first.diagnosis_result, first.status
    second = workflow.update_symptoms(db, d.id, farmer.id, ["Fever", "Lameness"])
    assert (second.diagnosis_result, second.status) == (result, status) == ("Foot and Mouth Disease", "completed")


def test_update_symptoms_any_candidate_when_threshold_zero(db, farmer):
    d = submit(db, farmer)
    d = workflow.update_symptoms(db, d.id, farmer.id, ["Yellow leaves"], min_matches=0)
    assert d.status == "completed"
    assert d.diagnosis_result == "Late Blight"


@pytest.mark.parametrize("symptoms", [None, [], "Fever", [""]])
def test_update_symptoms_requires_array(db, farmer, symptoms):
    d = submit(db, farmer)
    with pytest.raises(ValidationError):
        workflow.update_symptoms(db, d.id, farmer.id, symptoms)


def test_other_users_records_are_not_found(db, farmer, other_farmer):
    d = submit(db, farmer)
    with pytest.raises(NotFound):
        workflow.get_by_id(db, d.id, other_farmer.id)
    with pytest.raises(NotFound):
        workflow.update_symptoms(db, d.id, other_farmer.id, LATE_BLIGHT_SYMPTOMS)
    with pytest.raises(NotFound):
        workflow.get_by_id(db, "missing", farmer.id)


def test_get_by_id_joins_disease(db, farmer):
    d = submit(db, farmer)
    record, disease = workflow.get_by_id(db, d.id, farmer.id)
    assert disease is None

    workflow.update_symptoms(db, d.id, farmer.id, LATE_BLIGHT_SYMPTOMS)
    record, disease = workflow.get_by_id(db, d.id, farmer.id)
    assert disease.name == "Late Blight"
    assert disease.id == record.disease_id


def test_disease_lookup_falls_back_to_name(db, farmer):
    d = submit(db, farmer)
    d.diagnosis_result = "Late Blight"
    d.confidence = 0.9
    d.status = "completed"
    db.commit()
    assert workflow.disease_for(db, d).name == "Late Blight"


def test_list_for_user_newest_first(db, farmer, other_farmer):
    first = submit(db, farmer)
    second = submit(db, farmer, species_name="corn")
    submit(db, other_farmer)
    rows = workflow.list_for_user(db, farmer.id)
    assert [r.id for r in rows] == [second.id, first.id]


def test_review_queue_and_expert_advice(db, farmer):
    d = submit(db, farmer)
    workflow.update_symptoms(db, d.id, farmer.id, ["Yellow leaves"])
    assert [r.id for r in workflow.review_queue(db)] == [d.id]

    d = workflow.add_expert_advice(db, d.id, "  Likely nutrient deficiency; test soil.  ")
    assert d.expert_advice == "Likely nutrient deficiency; test soil."
    with pytest.raises(ValidationError):
        workflow.add_expert_advice(db, d.id, "   ")
    with pytest.raises(NotFound):
        workflow.add_expert_advice(db, "missing", "advice")
