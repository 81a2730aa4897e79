import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, DateTime, Text, Boolean, JSON, Enum, ForeignKey
from sqlalchemy.orm import relationship

from .database import Base

DIAGNOSIS_TYPES = ("plant", "livestock")
DIAGNOSIS_STATUSES = ("pending", "completed", "expert_review")
SEVERITIES = ("low", "medium", "high")
USER_ROLES = ("farmer", "veterinarian", "expert", "admin")


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    # Naive UTC; SQLite drops tzinfo on round-trip
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    username = Column(String(255), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    location = Column(String(255), nullable=True)
    role = Column(Enum(*USER_ROLES, name="user_role"), nullable=False, default="farmer")
    created_at = Column(DateTime, default=utcnow)

    diagnoses = relationship("Diagnosis", back_populates="user")
    tokens = relationship("AuthToken", back_populates="user", cascade="all, delete-orphan")


class AuthToken(Base):
    __tablename__ = "auth_tokens"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    user = relationship("User", back_populates="tokens")


class PlantDisease(Base):
    __tablename__ = "plant_diseases"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False, index=True)
    plant_type = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    symptoms = Column(JSON, nullable=False, default=list)
    causes = Column(Text, nullable=True)
    prevention_methods = Column(JSON, nullable=False, default=list)
    treatment_methods = Column(JSON, nullable=False, default=list)
    image_urls = Column(JSON, nullable=False, default=list)
    optimal_temperature = Column(String(50), nullable=True)
    severity = Column(Enum(*SEVERITIES, name="disease_severity"), nullable=True)

    @property
    def species_key(self) -> str:
        return self.plant_type


class LivestockDisease(Base):
    __tablename__ = "livestock_diseases"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False, index=True)
    animal_type = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    symptoms = Column(JSON, nullable=False, default=list)
    causes = Column(Text, nullable=True)
    prevention_methods = Column(JSON, nullable=False, default=list)
    treatment_methods = Column(JSON, nullable=False, default=list)
    image_urls = Column(JSON, nullable=False, default=list)
    temperature_factors = Column(Text, nullable=True)
    # [low, high] in Celsius; [None, None] when unknown
    ideal_temperature = Column(JSON, nullable=False, default=lambda: [None, None])
    zoonotic = Column(Boolean, nullable=False, default=False)
    severity = Column(Enum(*SEVERITIES, name="disease_severity"), nullable=True)
    incubation_period = Column(String(100), nullable=True)

    @property
    def species_key(self) -> str:
        return self.animal_type


class Diagnosis(Base):
    __tablename__ = "diagnoses"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    type = Column(Enum(*DIAGNOSIS_TYPES, name="diagnosis_type"), nullable=False)
    species_name = Column(String(255), nullable=False)
    symptoms = Column(JSON, nullable=False, default=list)
    image_url = Column(String(1024), nullable=True)
    temperature = Column(Float, nullable=True)
    # Matched catalog entry: id for lookups, name for display
    disease_id = Column(String(36), nullable=True)
    diagnosis_result = Column(String(255), nullable=True)
    confidence = Column(Float, nullable=True)
    status = Column(Enum(*DIAGNOSIS_STATUSES, name="diagnosis_status"), nullable=False, default="pending")
    notes = Column(Text, nullable=True)
    expert_advice = Column(Text, nullable=True)
    treatment_plan = Column(JSON, nullable=True)
    location = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="diagnoses")
