import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quizhub.core.database import get_db
from quizhub.models.orm import User

logger = logging.getLogger(__name__)
router = APIRouter()

class Register(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    role: Optional[Literal["student", "teacher", "admin"]] = None

class Login(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None

# Credentials are stored and compared in plaintext.
@router.post("/register", status_code=201)
def register(payload: Register, db: Session = Depends(get_db)):
    if not payload.username or not payload.password:
        raise HTTPException(400, "username and password required")
    user = User(username=payload.username, password=payload.password, role=payload.role or "student")
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "username exists")
    db.refresh(user)
    logger.info("Registered %s as %s", user.username, user.role)
    return {"id": user.id, "username": user.username, "role": user.role}

@router.post("/login")
def login(payload: Login, db: Session = Depends(get_db)):
    user = db.scalar(select(User).where(User.username == payload.username, User.password == payload.password))
    if not user or not payload.password: raise HTTPException(401, "invalid credentials")
    return {"id": user.id, "username": user.username, "role": user.role}
