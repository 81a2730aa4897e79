"""
Diagnosis workflow.

A diagnosis starts `pending`. It becomes `completed` once a catalog entry is
matched (image identification at submission, or symptom scoring on
resubmission) and `expert_review` when symptom scoring finds nothing. Every
symptom resubmission resets it to `pending` before scoring again.
"""
import logging
from typing import List, Optional, Sequence, Tuple, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import catalog, models, scoring
from .advice import build_treatment_plan
from .catalog import DiseaseEntry
from .errors import NotFound, ValidationError
from .scoring import Match, ScorerBackend
from .storage import ImageStore, ImageUpload, get_image_store, validate_image

logger = logging.getLogger(__name__)


def _clean_symptoms(symptoms: Union[None, str, Sequence[str]]) -> List[str]:
    if symptoms is None:
        return []
    if isinstance(symptoms, str):
        symptoms = [symptoms]
    return [s for s in symptoms if isinstance(s, str) and s != ""]


def _complete(diagnosis: models.Diagnosis, match: Match) -> None:
    diagnosis.disease_id = match.disease.id
    diagnosis.diagnosis_result = match.disease.name
    diagnosis.confidence = match.confidence
    diagnosis.treatment_plan = build_treatment_plan(match.disease)
    diagnosis.status = "completed"


def _clear_result(diagnosis: models.Diagnosis) -> None:
    diagnosis.disease_id = None
    diagnosis.diagnosis_result = None
    diagnosis.confidence = None
    diagnosis.treatment_plan = None


def submit(
    db: Session,
    user_id: Optional[str],
    type_: Optional[str],
    species_name: Optional[str],
    symptoms: Union[None, str, Sequence[str]],
    image: Optional[ImageUpload] = None,
    temperature: Optional[float] = None,
    notes: Optional[str] = None,
    location: Optional[str] = None,
    store: Optional[ImageStore] = None,
    backend: Optional[ScorerBackend] = None,
) -> models.Diagnosis:
    symptoms = _clean_symptoms(symptoms)
    if not type_ or not species_name or not symptoms:
        raise ValidationError('Missing required fields: type, speciesName, symptoms')
    if type_ not in models.DIAGNOSIS_TYPES:
        raise ValidationError('Invalid diagnosis type. Must be "plant" or "livestock"')

    if image is not None:
        validate_image(image)
        store = store or get_image_store()

    diagnosis = models.Diagnosis(
        user_id=user_id,
        type=type_,
        species_name=species_name,
        symptoms=symptoms,
        temperature=temperature,
        notes=notes,
        location=location,
        status="pending",
    )
    db.add(diagnosis)
    db.flush()

    # Upload only once the row is accepted; a failed commit removes the object again
    image_url = None
    if image is not None:
        try:
            image_url = store.save(image)
        except Exception:
            db.rollback()
            raise
        diagnosis.image_url = image_url
        backend = backend or scoring.get_scorer_backend()
        candidates = catalog.list_by_species(db, type_, species_name)
        match = backend.identify(candidates, image_url)
        if match is not None:
            _complete(diagnosis, match)
            logger.info("Diagnosis %s identified from image as %s (%.2f)",
                        diagnosis.id, match.disease.name, match.confidence)
        else:
            logger.info("Diagnosis %s: no catalog entries for %s %r", diagnosis.id, type_, species_name)

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        if image_url:
            store.delete(image_url)
        raise
    db.refresh(diagnosis)
    logger.info("Diagnosis %s submitted by user %s (%s)", diagnosis.id, user_id, diagnosis.status)
    return diagnosis


def _get_owned(db: Session, diagnosis_id: str, user_id: Optional[str]) -> models.Diagnosis:
    diagnosis = (
        db.query(models.Diagnosis)
        .filter(models.Diagnosis.id == diagnosis_id, models.Diagnosis.user_id == user_id)
        .first()
    )
    # Records owned by someone else are reported as missing
    if diagnosis is None:
        raise NotFound('Diagnosis not found')
    return diagnosis


def update_symptoms(
    db: Session,
    diagnosis_id: str,
    user_id: Optional[str],
    symptoms: Optional[Sequence[str]],
    min_matches: Optional[int] = None,
) -> models.Diagnosis:
    if not isinstance(symptoms, (list, tuple)) or not _clean_symptoms(symptoms):
        raise ValidationError('Symptoms array is required')

    symptoms = _clean_symptoms(symptoms)

    diagnosis = _get_owned(db, diagnosis_id, user_id)
    diagnosis.symptoms = symptoms
    diagnosis.status = "pending"
    _clear_result(diagnosis)

    match = scoring.match_symptoms(db, diagnosis.type, diagnosis.species_name, symptoms, min_matches=min_matches)
    if match is not None:
        _complete(diagnosis, match)
        logger.info("Diagnosis %s matched %s on %d symptom(s)", diagnosis.id, match.disease.name, match.match_count)
    else:
        diagnosis.status = "expert_review"
        logger.info("Diagnosis %s sent to expert review", diagnosis.id)

    db.commit()
    db.refresh(diagnosis)
    return diagnosis


def disease_for(db: Session, diagnosis: models.Diagnosis) -> Optional[DiseaseEntry]:
    if not diagnosis.diagnosis_result:
        return None
    model = catalog.disease_model(diagnosis.type)
    if diagnosis.disease_id:
        entry = db.get(model, diagnosis.disease_id)
        if entry is not None:
            return entry
    # Rows without a stored id (or whose entry was re-seeded) fall back to the name
    return db.query(model).filter(model.name == diagnosis.diagnosis_result).first()


def get_by_id(db: Session, diagnosis_id: str, user_id: Optional[str]) -> Tuple[models.Diagnosis, Optional[DiseaseEntry]]:
    diagnosis = _get_owned(db, diagnosis_id, user_id)
    return diagnosis, disease_for(db, diagnosis)


def list_for_user(db: Session, user_id: str) -> List[models.Diagnosis]:
    return (
        db.query(models.Diagnosis)
        .filter(models.Diagnosis.user_id == user_id)
        .order_by(models.Diagnosis.created_at.desc())
        .all()
    )


def review_queue(db: Session) -> List[models.Diagnosis]:
    """Diagnoses awaiting an expert, oldest first."""
    return (
        db.query(models.Diagnosis)
        .filter(models.Diagnosis.status == "expert_review")
        .order_by(models.Diagnosis.created_at.asc())
        .all()
    )


def add_expert_advice(db: Session, diagnosis_id: str, advice: Optional[str]) -> models.Diagnosis:
    if not advice or not advice.strip():
        raise ValidationError('Expert advice is required')
    diagnosis = db.get(models.Diagnosis, diagnosis_id)
    if diagnosis is None:
        raise NotFound('Diagnosis not found')
    diagnosis.expert_advice = advice.strip()
    db.commit()
    db.refresh(diagnosis)
    logger.info("Expert advice recorded on diagnosis %s", diagnosis.id)
    return diagnosis
