from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import catalog, schemas
from ..database import get_db
from ..security import get_current_user

# All routes require authentication
router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/type/{type_}", response_model=schemas.DiseaseListResponse)
def get_diseases_by_type(type_: str, db: Session = Depends(get_db)):
    rows = catalog.list_by_type(db, type_)
    return schemas.DiseaseListResponse(diseases=[schemas.disease_out(r) for r in rows])


@router.get("/species/{type_}/{species}", response_model=schemas.DiseaseListResponse)
def get_diseases_by_species(type_: str, species: str, db: Session = Depends(get_db)):
    rows = catalog.list_by_species(db, type_, species)
    return schemas.DiseaseListResponse(diseases=[schemas.disease_out(r) for r in rows])


@router.get("/search/{type_}/{query}", response_model=schemas.SearchResponse)
def search_diseases(type_: str, query: str, db: Session = Depends(get_db)):
    results = catalog.search(db, type_, query)
    return schemas.SearchResponse(
        plant_diseases=[schemas.PlantDiseaseOut.model_validate(r) for r in results["plant"]],
        livestock_diseases=[schemas.LivestockDiseaseOut.model_validate(r) for r in results["livestock"]],
        total_results=len(results["plant"]) + len(results["livestock"]),
    )


@router.get("/symptoms/{type_}", response_model=schemas.SymptomListResponse)
def get_symptoms_list(type_: str, db: Session = Depends(get_db)):
    symptoms = catalog.list_distinct_symptoms(db, type_)
    return schemas.SymptomListResponse(symptoms=symptoms, count=len(symptoms))


# Declared last so the fixed prefixes above take precedence
@router.get("/{type_}/{disease_id}", response_model=schemas.DiseaseResponse)
def get_disease_by_id(type_: str, disease_id: str, db: Session = Depends(get_db)):
    return schemas.DiseaseResponse(disease=schemas.disease_out(catalog.get_by_id(db, type_, disease_id)))
