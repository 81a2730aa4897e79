from datetime import datetime
from typing import List, Optional, Literal, Union

from pydantic import BaseModel, Field, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

from . import models


class CamelModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, alias_generator=to_camel)


# ---- users / auth ----

class RegisterRequest(CamelModel):
    username: str = Field(min_length=3, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)
    phone: Optional[str] = None
    location: Optional[str] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class ProfileUpdate(CamelModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    location: Optional[str] = None


class UserOut(CamelModel):
    id: str
    username: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserOut


class ProfileResponse(CamelModel):
    user: UserOut


# ---- disease catalog ----

class DiseaseBase(CamelModel):
    id: str
    name: str
    description: str
    symptoms: List[str] = Field(default_factory=list)
    causes: Optional[str] = None
    prevention_methods: List[str] = Field(default_factory=list)
    treatment_methods: List[str] = Field(default_factory=list)
    image_urls: List[str] = Field(default_factory=list)
    severity: Optional[Literal['low', 'medium', 'high']] = None


class PlantDiseaseOut(DiseaseBase):
    plant_type: str
    optimal_temperature: Optional[str] = None


class LivestockDiseaseOut(DiseaseBase):
    animal_type: str
    temperature_factors: Optional[str] = None
    ideal_temperature: List[Optional[float]] = Field(default_factory=lambda: [None, None])
    zoonotic: bool = False
    incubation_period: Optional[str] = None


DiseaseOut = Union[PlantDiseaseOut, LivestockDiseaseOut]


def disease_out(entry) -> DiseaseOut:
    if isinstance(entry, models.LivestockDisease):
        return LivestockDiseaseOut.model_validate(entry)
    return PlantDiseaseOut.model_validate(entry)


class DiseaseListResponse(CamelModel):
    diseases: List[DiseaseOut]


class DiseaseResponse(CamelModel):
    disease: DiseaseOut


class SearchResponse(CamelModel):
    plant_diseases: List[PlantDiseaseOut]
    livestock_diseases: List[LivestockDiseaseOut]
    total_results: int


class SymptomListResponse(CamelModel):
    symptoms: List[str]
    count: int


# ---- diagnoses ----

class SymptomsUpdate(CamelModel):
    symptoms: Optional[List[str]] = None


class ExpertAdviceUpdate(CamelModel):
    advice: Optional[str] = None


class DiagnosisOut(CamelModel):
    id: str
    user_id: Optional[str] = None
    type: Literal['plant', 'livestock']
    species_name: str
    symptoms: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    temperature: Optional[float] = None
    disease_id: Optional[str] = None
    diagnosis_result: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0, le=1)
    status: Literal['pending', 'completed', 'expert_review']
    notes: Optional[str] = None
    expert_advice: Optional[str] = None
    treatment_plan: Optional[List[str]] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DiagnosisSubmitted(CamelModel):
    message: str
    diagnosis: DiagnosisOut


class DiagnosisDetail(CamelModel):
    message: Optional[str] = None
    diagnosis: DiagnosisOut
    disease_details: Optional[DiseaseOut] = None


class DiagnosisHistory(CamelModel):
    diagnoses: List[DiagnosisOut]


# ---- weather ----

class WeatherTips(CamelModel):
    watering: str
    spraying: str
    planting: str
    harvesting: str
    general: str
