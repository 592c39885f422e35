import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from pydantic import ValidationError

from quizhub.client.errors import RemoteError
from quizhub.client.grading import Selections, grade
from quizhub.client.schemas import Attempt, Location, Question, QuizSummary
from quizhub.client.state import AppState
from quizhub.client.store import STUDENT_ATTEMPTS

logger = logging.getLogger(__name__)


class AttemptRecorder:
    """Grades submissions and keeps the append-only attempt log in the local store.

    Attempts on remote quizzes are also posted to the results endpoint; that
    write is best effort and never blocks the local record.
    """

    def __init__(self, state: AppState):
        self.state = state
        self._last_taken_at: Optional[datetime] = None

    def _now(self) -> datetime:
        now = datetime.now(timezone.utc)
        if self._last_taken_at is not None and now <= self._last_taken_at:
            now = self._last_taken_at + timedelta(microseconds=1)
        self._last_taken_at = now
        return now

    def _log(self) -> list:
        log = self.state.store.get(STUDENT_ATTEMPTS, [])
        if log is None:
            return []
        if not isinstance(log, list):
            logger.warning(f"Attempt log is not a list ({type(log).__name__}), starting a new one")
            return []
        return log

    def _submit_result(self, attempt: Attempt, quiz: QuizSummary) -> None:
        if quiz.location != Location.REMOTE:
            return
        user = self.state.current_user
        user_id = user.id if user and user.username == attempt.username else None
        try:
            self.state.api.submit_result({"quiz_id": attempt.quiz_id, "user_id": user_id,
                                          "score": attempt.score, "total": attempt.total})
        except RemoteError as e:
            logger.warning(f"Result for quiz {attempt.quiz_id} kept locally only: {e}")

    def record_attempt(self, username: str, quiz: QuizSummary, questions: Sequence[Question],
                       selections: Selections) -> Attempt:
        attempt = Attempt(username=username, quiz_id=quiz.id, quiz_title=quiz.title or "",
                          score=grade(questions, selections), total=len(questions), taken_at=self._now())
        log = self._log()
        log.append(attempt.model_dump(by_alias=True, mode="json"))
        self.state.store.set(STUDENT_ATTEMPTS, log)
        logger.info("Recorded attempt %s/%s for %s on quiz %s", attempt.score, attempt.total, username, quiz.id)
        self._submit_result(attempt, quiz)
        return attempt

    def all_attempts(self) -> List[Attempt]:
        attempts = []
        for raw in self._log():
            try:
                attempts.append(Attempt.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed attempt record: {e}")
        return attempts

    def list_attempts(self, username: str) -> List[Attempt]:
        """Attempts by ``username``, newest first."""
        mine = [a for a in self.all_attempts() if a.username == username]
        return sorted(mine, key=lambda a: _as_utc(a.taken_at), reverse=True)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
