from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Set

from quizhub.client.schemas import Attempt, QuizSummary

SORT_KEYS = ("title", "category")
STATUS_FILTERS = ("all", "attempted", "not_attempted")


@dataclass
class QuizStatus:
    quiz: QuizSummary
    attempted: bool
    attempts: int = 0
    best_score: Optional[int] = None


def attempted_ids(attempts: Iterable[Attempt], username: Optional[str] = None) -> Set[str]:
    return {str(a.quiz_id) for a in attempts if username is None or a.username == username}


def filtered_quizzes(all_quizzes: Sequence[QuizSummary], attempts: Iterable[Attempt], subject_filter: str = "all",
                     status_filter: str = "all", sort_key: str = "title",
                     username: Optional[str] = None) -> List[QuizSummary]:
    """Filter by category and attempted status, then sort by title or category.

    Ids are compared as strings. Sorting ignores case; unknown sort keys keep
    the input order, and ties keep input order too.
    """
    done = attempted_ids(attempts, username)
    quizzes = list(all_quizzes)
    if subject_filter != "all":
        quizzes = [q for q in quizzes if (q.category or "") == subject_filter]
    if status_filter == "attempted":
        quizzes = [q for q in quizzes if str(q.id) in done]
    elif status_filter == "not_attempted":
        quizzes = [q for q in quizzes if str(q.id) not in done]
    if sort_key in SORT_KEYS:
        quizzes.sort(key=lambda q: (getattr(q, sort_key) or "").casefold())
    return quizzes


def annotate_status(quizzes: Sequence[QuizSummary], attempts: Iterable[Attempt],
                    username: Optional[str] = None) -> List[QuizStatus]:
    mine = [a for a in attempts if username is None or a.username == username]
    annotated = []
    for quiz in quizzes:
        scores = [a.score for a in mine if str(a.quiz_id) == str(quiz.id)]
        annotated.append(QuizStatus(quiz=quiz, attempted=bool(scores), attempts=len(scores),
                                    best_score=max(scores) if scores else None))
    return annotated
