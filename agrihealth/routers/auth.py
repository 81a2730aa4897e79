import logging

from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..errors import AuthenticationError, Conflict
from ..security import check_password, get_current_user, hash_password, issue_token

logger = logging.getLogger(__name__)

router = APIRouter()


def _ensure_unique(db: Session, username=None, email=None, exclude_id=None):
    clauses = []
    if username:
        clauses.append(models.User.username == username)
    if email:
        clauses.append(models.User.email == email)
    if not clauses:
        return
    q = db.query(models.User).filter(or_(*clauses))
    if exclude_id:
        q = q.filter(models.User.id != exclude_id)
    if q.first() is not None:
        raise Conflict("Username or email already in use")


@router.post("/register", response_model=schemas.AuthResponse, status_code=201)
def register(payload: schemas.RegisterRequest, db: Session = Depends(get_db)):
    email = payload.email.lower()
    _ensure_unique(db, username=payload.username, email=email)
    user = models.User(
        username=payload.username,
        email=email,
        password_hash=hash_password(payload.password),
        phone=payload.phone,
        location=payload.location,
        # reviewer and admin roles are granted out of band
        role="farmer",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User %s registered as %s", user.id, user.role)
    token = issue_token(db, user)
    return schemas.AuthResponse(message="User registered successfully", token=token, user=schemas.UserOut.model_validate(user))


@router.post("/login", response_model=schemas.AuthResponse)
def login(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    user = db.query(models.User).filter(models.User.email == payload.email.lower()).first()
    if user is None or not check_password(user.password_hash, payload.password):
        logger.warning("Failed login for %s", payload.email)
        raise AuthenticationError("Invalid email or password")
    token = issue_token(db, user)
    return schemas.AuthResponse(message="Login successful", token=token, user=schemas.UserOut.model_validate(user))


@router.get("/profile", response_model=schemas.ProfileResponse)
def get_profile(user: models.User = Depends(get_current_user)):
    return schemas.ProfileResponse(user=schemas.UserOut.model_validate(user))


@router.put("/profile", response_model=schemas.ProfileResponse)
def update_profile(
    payload: schemas.ProfileUpdate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in updates:
        updates["email"] = updates["email"].lower()
    _ensure_unique(db, username=updates.get("username"), email=updates.get("email"), exclude_id=user.id)
    for key, value in updates.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return schemas.ProfileResponse(user=schemas.UserOut.model_validate(user))
