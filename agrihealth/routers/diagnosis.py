from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from .. import diagnosis as workflow
from .. import models, schemas
from ..database import get_db
from ..scoring import ScorerBackend, get_scorer_backend
from ..security import get_current_user, require_roles
from ..storage import ImageStore, ImageUpload, get_image_store

router = APIRouter(dependencies=[Depends(get_current_user)])

REVIEWER_ROLES = ("expert", "veterinarian", "admin")


def _detail(diagnosis, disease, message=None) -> schemas.DiagnosisDetail:
    return schemas.DiagnosisDetail(
        message=message,
        diagnosis=schemas.DiagnosisOut.model_validate(diagnosis),
        disease_details=schemas.disease_out(disease) if disease is not None else None,
    )


@router.post("", response_model=schemas.DiagnosisSubmitted, status_code=201)
async def submit_diagnosis(
    type_: Optional[str] = Form(None, alias="type"),
    species_name: Optional[str] = Form(None, alias="speciesName"),
    symptoms: Optional[List[str]] = Form(None),
    # the mobile client appends each symptom as `symptoms[]`
    symptoms_brackets: Optional[List[str]] = Form(None, alias="symptoms[]"),
    temperature: Optional[float] = Form(None),
    notes: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
    backend: ScorerBackend = Depends(get_scorer_backend),
):
    upload = None
    if image is not None and image.filename:
        upload = ImageUpload(
            filename=image.filename,
            content_type=image.content_type or "",
            data=await image.read(),
        )
    diagnosis = workflow.submit(
        db,
        user.id,
        type_,
        species_name,
        (symptoms or []) + (symptoms_brackets or []),
        image=upload,
        temperature=temperature,
        notes=notes,
        location=location,
        store=store,
        backend=backend,
    )
    return schemas.DiagnosisSubmitted(
        message="Diagnosis submitted successfully",
        diagnosis=schemas.DiagnosisOut.model_validate(diagnosis),
    )


@router.get("/history", response_model=schemas.DiagnosisHistory)
def get_user_diagnoses(user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    rows = workflow.list_for_user(db, user.id)
    return schemas.DiagnosisHistory(diagnoses=[schemas.DiagnosisOut.model_validate(r) for r in rows])


@router.get("/review-queue", response_model=schemas.DiagnosisHistory)
def get_review_queue(
    reviewer: models.User = Depends(require_roles(*REVIEWER_ROLES)),
    db: Session = Depends(get_db),
):
    rows = workflow.review_queue(db)
    return schemas.DiagnosisHistory(diagnoses=[schemas.DiagnosisOut.model_validate(r) for r in rows])


@router.put("/{diagnosis_id}/symptoms", response_model=schemas.DiagnosisDetail)
def update_diagnosis_symptoms(
    diagnosis_id: str,
    payload: schemas.SymptomsUpdate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    diagnosis = workflow.update_symptoms(db, diagnosis_id, user.id, payload.symptoms)
    return _detail(diagnosis, workflow.disease_for(db, diagnosis), message="Diagnosis updated successfully")


@router.put("/{diagnosis_id}/expert-advice", response_model=schemas.DiagnosisDetail)
def add_expert_advice(
    diagnosis_id: str,
    payload: schemas.ExpertAdviceUpdate,
    reviewer: models.User = Depends(require_roles(*REVIEWER_ROLES)),
    db: Session = Depends(get_db),
):
    diagnosis = workflow.add_expert_advice(db, diagnosis_id, payload.advice)
    return _detail(diagnosis, workflow.disease_for(db, diagnosis), message="Expert advice saved")


@router.get("/{diagnosis_id}", response_model=schemas.DiagnosisDetail)
def get_diagnosis(diagnosis_id: str, user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    diagnosis, disease = workflow.get_by_id(db, diagnosis_id, user.id)
    return _detail(diagnosis, disease)
