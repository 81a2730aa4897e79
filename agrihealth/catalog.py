"""Read access to the plant and livestock disease catalog."""
from typing import Dict, List, Set, Type, Union

from sqlalchemy import or_
from sqlalchemy.orm import Session

from . import models
from .errors import InvalidQuery, InvalidType, NotFound

DiseaseEntry = Union[models.PlantDisease, models.LivestockDisease]

MIN_QUERY_LENGTH = 2


def disease_model(type_: str) -> Type[DiseaseEntry]:
    if type_ == "plant":
        return models.PlantDisease
    if type_ == "livestock":
        return models.LivestockDisease
    raise InvalidType('Invalid type. Must be "plant" or "livestock"')


def _species_column(model):
    return model.plant_type if model is models.PlantDisease else model.animal_type


def list_by_type(db: Session, type_: str) -> List[DiseaseEntry]:
    model = disease_model(type_)
    return db.query(model).order_by(model.name.asc()).all()


def list_by_species(db: Session, type_: str, species_key: str) -> List[DiseaseEntry]:
    """Entries whose species key equals `species_key` exactly (case-sensitive)."""
    model = disease_model(type_)
    rows = (
        db.query(model)
        .filter(_species_column(model) == species_key)
        .order_by(model.name.asc())
        .all()
    )
    # Some backends compare case-insensitively (MySQL collations); enforce exact equality here
    return [r for r in rows if r.species_key == species_key]


def get_by_id(db: Session, type_: str, disease_id: str) -> DiseaseEntry:
    model = disease_model(type_)
    entry = db.get(model, disease_id)
    if entry is None:
        raise NotFound("Disease not found")
    return entry


def search(db: Session, type_: str, query: str) -> Dict[str, List[DiseaseEntry]]:
    """Case-insensitive substring search over name and description.

    `type_` may be "plant", "livestock" or "all".
    """
    if not query or len(query) < MIN_QUERY_LENGTH:
        raise InvalidQuery(f"Search query must be at least {MIN_QUERY_LENGTH} characters")
    if type_ not in ("plant", "livestock", "all"):
        raise InvalidType('Invalid type. Must be "plant", "livestock", or "all"')

    results = {"plant": [], "livestock": []}
    for key in ("plant", "livestock"):
        if type_ not in (key, "all"):
            continue
        model = disease_model(key)
        results[key] = (
            db.query(model)
            .filter(or_(
                model.name.icontains(query, autoescape=True),
                model.description.icontains(query, autoescape=True),
            ))
            .order_by(model.name.asc())
            .all()
        )
    return results


def list_distinct_symptoms(db: Session, type_: str) -> List[str]:
    model = disease_model(type_)
    seen: Set[str] = set()
    for (symptoms,) in db.query(model.symptoms).all():
        seen.update(s for s in (symptoms or []) if s)
    return sorted(seen)
