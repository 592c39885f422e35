"""
Student-side quiz access: remote first, local snapshot when the API is down.
"""
import logging
from typing import List

from quizhub.client.errors import RemoteError
from quizhub.client.schemas import Location, Question, QuizSummary, adapt_question, adapt_quizzes
from quizhub.client.state import AppState
from quizhub.client.store import QUIZZES, QUIZZES_CACHE

logger = logging.getLogger(__name__)


class QuizRepository:
    def __init__(self, state: AppState):
        self.state = state

    def list_quizzes(self) -> List[QuizSummary]:
        """Remote list when reachable (and it replaces the cached snapshot),
        else the cached snapshot, else the legacy local quiz list."""
        if self.state.api.health():
            try:
                rows = self.state.api.list_quizzes()
                self.state.store.set(QUIZZES_CACHE, rows)
                return adapt_quizzes(rows, Location.REMOTE)
            except RemoteError as e:
                logger.warning(f"Failed to fetch quizzes from API, falling back to cache/local: {e}")
        cache = self.state.store.get(QUIZZES_CACHE)
        if cache is not None:
            return adapt_quizzes(cache)
        return adapt_quizzes(self.state.store.get(QUIZZES, []), Location.LOCAL)

    def get_quiz_detail(self, quiz_id) -> List[Question]:
        if self.state.api.health():
            try:
                questions = []
                for raw in self.state.api.list_questions(quiz_id):
                    options = self.state.api.list_options(raw["id"])
                    questions.append(adapt_question({**raw, "options": options}))
                return questions
            except (RemoteError, KeyError) as e:
                logger.warning(f"API quiz detail failed for {quiz_id}: {e}")
        for record in self.state.store.get(QUIZZES, []) or []:
            if isinstance(record, dict) and str(record.get("id")) == str(quiz_id):
                return [adapt_question(q) for q in record.get("questions") or []]
        return []

    def find_quiz(self, quiz_id) -> QuizSummary:
        for quiz in self.list_quizzes():
            if quiz.id == str(quiz_id):
                return quiz
        return QuizSummary(id=str(quiz_id), title="Quiz")
