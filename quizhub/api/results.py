from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from quizhub.core.database import get_db
from quizhub.models.orm import Result

router = APIRouter()

class ResultCreate(BaseModel):
    quiz_id: Optional[int] = None
    user_id: Optional[int] = None
    score: int = Field(ge=0)
    total: Optional[int] = Field(default=None, ge=0)

def _row(r: Result) -> dict:
    return {"id": r.id, "quiz_id": r.quiz_id, "user_id": r.user_id, "score": r.score, "total": r.total,
            "taken_at": r.taken_at}

@router.post("", status_code=201)
def submit_result(payload: ResultCreate, db: Session = Depends(get_db)):
    r = Result(**payload.model_dump())
    db.add(r); db.commit(); db.refresh(r)
    return _row(r)

@router.get("")
def list_results(user_id: Optional[int] = Query(None), db: Session = Depends(get_db)):
    stmt = select(Result).order_by(Result.taken_at.desc(), Result.id.desc())
    if user_id is not None: stmt = stmt.where(Result.user_id == user_id)
    return [_row(r) for r in db.scalars(stmt).all()]
