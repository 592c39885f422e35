from quizhub.models.orm import Quiz, Question, Option

def quiz_row(q: Quiz) -> dict:
    return {"id": q.id, "title": q.title, "description": q.description, "category": q.category,
            "published": bool(q.published), "created_at": q.created_at,
            "created_by": q.creator.username if q.creator else None}

def question_row(q: Question) -> dict:
    return {"id": q.id, "quiz_id": q.quiz_id, "text": q.text, "type": q.qtype, "created_at": q.created_at}

def option_row(o: Option) -> dict:
    return {"id": o.id, "question_id": o.question_id, "text": o.text, "is_correct": bool(o.is_correct),
            "created_at": o.created_at}
