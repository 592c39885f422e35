from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from quizhub.api.serializers import question_row, option_row
from quizhub.core.database import get_db
from quizhub.models.orm import Quiz, Question, Option

router = APIRouter()

class QuestionCreate(BaseModel):
    quiz_id: Optional[int] = None
    text: Optional[str] = None
    type: Literal["single", "multi"] = "single"

class OptionCreate(BaseModel):
    question_id: Optional[int] = None
    text: Optional[str] = None
    is_correct: bool = False

@router.post("/questions", status_code=201)
def create_question(payload: QuestionCreate, db: Session = Depends(get_db)):
    if not payload.quiz_id: raise HTTPException(400, "quiz_id required")
    if not db.get(Quiz, payload.quiz_id): raise HTTPException(404, "quiz not found")
    q = Question(quiz_id=payload.quiz_id, text=payload.text or None, qtype=payload.type)
    db.add(q); db.commit(); db.refresh(q)
    return question_row(q)

@router.get("/questions/{question_id}/options")
def list_options(question_id: int, db: Session = Depends(get_db)):
    rows = db.scalars(select(Option).where(Option.question_id == question_id).order_by(Option.id)).all()
    return [option_row(o) for o in rows]

@router.post("/options", status_code=201)
def create_option(payload: OptionCreate, db: Session = Depends(get_db)):
    if not payload.question_id: raise HTTPException(400, "question_id required")
    if not db.get(Question, payload.question_id): raise HTTPException(404, "question not found")
    o = Option(question_id=payload.question_id, text=payload.text or None, is_correct=payload.is_correct)
    db.add(o); db.commit(); db.refresh(o)
    return option_row(o)
