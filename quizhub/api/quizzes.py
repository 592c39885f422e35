import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from quizhub.api.serializers import quiz_row, question_row
from quizhub.core.database import get_db
from quizhub.models.orm import Quiz, Question, User

logger = logging.getLogger(__name__)
router = APIRouter()

class QuizCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    created_by: Union[int, str, None] = None

class QuizPatch(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    published: Optional[bool] = None
    created_by: Union[int, str, None] = None

def resolve_or_create_user_id(db: Session, created_by) -> Optional[int]:
    """Map a username or numeric id to a user id.

    JSON integers must name an existing user; strings are always usernames,
    even all-digit ones. An unknown username is created
    on the fly as a teacher with an empty password, so quizzes authored offline
    can be pushed before their author ever registered.
    """
    if created_by is None:
        return None
    if isinstance(created_by, int):
        user = db.get(User, created_by)
        return user.id if user else None
    username = str(created_by).strip()
    if not username:
        return None
    user = db.scalar(select(User).where(User.username == username))
    if user:
        return user.id
    user = User(username=username, password="", role="teacher")
    db.add(user); db.flush()
    logger.info("Auto-created user for migration: %s -> id %s", username, user.id)
    return user.id

def _get_quiz(db: Session, quiz_id: int) -> Quiz:
    quiz = db.get(Quiz, quiz_id)
    if not quiz: raise HTTPException(404, "not found")
    return quiz

@router.get("")
def list_quizzes(db: Session = Depends(get_db)):
    rows = db.scalars(select(Quiz).order_by(Quiz.created_at.desc(), Quiz.id.desc())).all()
    return [quiz_row(q) for q in rows]

@router.get("/{quiz_id}")
def get_quiz(quiz_id: int, db: Session = Depends(get_db)):
    return quiz_row(_get_quiz(db, quiz_id))

@router.post("", status_code=201)
def create_quiz(payload: QuizCreate, db: Session = Depends(get_db)):
    if not payload.title: raise HTTPException(400, "title required")
    quiz = Quiz(title=payload.title, description=payload.description or None, category=payload.category or None,
                created_by=resolve_or_create_user_id(db, payload.created_by), published=False)
    db.add(quiz); db.commit(); db.refresh(quiz)
    return quiz_row(quiz)

@router.patch("/{quiz_id}")
def update_quiz(quiz_id: int, payload: QuizPatch, db: Session = Depends(get_db)):
    fields = payload.model_dump(exclude_unset=True)
    if not fields: raise HTTPException(400, "no fields to update")
    quiz = _get_quiz(db, quiz_id)
    if "created_by" in fields:
        quiz.created_by = resolve_or_create_user_id(db, fields.pop("created_by"))
    for key, value in fields.items():
        setattr(quiz, key, bool(value) if key == "published" else value)
    db.commit(); db.refresh(quiz)
    return quiz_row(quiz)

@router.delete("/{quiz_id}")
def delete_quiz(quiz_id: int, db: Session = Depends(get_db)):
    quiz = db.get(Quiz, quiz_id)
    if quiz:
        db.delete(quiz); db.commit()
    return {"ok": True}

@router.get("/{quiz_id}/questions")
def list_questions(quiz_id: int, db: Session = Depends(get_db)):
    rows = db.scalars(select(Question).where(Question.quiz_id == quiz_id).order_by(Question.id)).all()
    return [question_row(q) for q in rows]
