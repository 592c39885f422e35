"""
Teacher-side authoring: save a quiz aggregate to the API, or to the local
draft store when any step of the remote save fails.

The remote save is three kinds of record created in sequence (quiz, then each
question, then each question's options). A failure part way through is not
rolled back: the partial remote quiz stays, and the whole draft is written
locally as well.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from quizhub.client.errors import NotFound, RemoteError, ValidationFailed
from quizhub.client.schemas import (DraftQuestion, Location, QuestionType, QuizDraft, QuizSummary, SaveResult,
                                    adapt_question, adapt_quiz, adapt_quizzes)
from quizhub.client.state import AppState
from quizhub.client.store import QUIZZES

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class QuizAuthoring:
    def __init__(self, state: AppState):
        self.state = state

    # ---------- local draft store ----------
    def _local_drafts(self) -> List[Dict[str, Any]]:
        rows = self.state.store.get(QUIZZES, []) or []
        return [r for r in rows if isinstance(r, dict)] if isinstance(rows, list) else []

    def _find_local(self, quiz_id) -> Optional[Dict[str, Any]]:
        if quiz_id is None:
            return None
        return next((r for r in self._local_drafts() if str(r.get("id")) == str(quiz_id)), None)

    def _new_local_id(self, taken) -> str:
        stamp = int(time.time() * 1000)
        while f"q_{stamp}" in taken:
            stamp += 1
        return f"q_{stamp}"

    def _save_local(self, draft: QuizDraft, created_by: Optional[str]) -> str:
        drafts = self._local_drafts()
        existing = self._find_local(draft.id)
        local_id = str(existing["id"]) if existing else self._new_local_id({str(r.get("id")) for r in drafts})
        record = draft.model_copy(update={
            "id": local_id, "created_by": created_by, "location": Location.LOCAL, "migrated": False,
            "published": bool(existing.get("published")) if existing else False, "last_updated": _now_iso(),
        }).model_dump(mode="json")
        if existing:
            drafts = [record if str(r.get("id")) == local_id else r for r in drafts]
        else:
            drafts.append(record)
        self.state.store.set(QUIZZES, drafts)
        return local_id

    def _remove_local(self, quiz_id) -> bool:
        drafts = self._local_drafts()
        kept = [r for r in drafts if str(r.get("id")) != str(quiz_id)]
        self.state.store.set(QUIZZES, kept)
        return len(kept) != len(drafts)

    # ---------- remote ----------
    def _create_remote(self, draft: QuizDraft, created_by: Optional[str]) -> str:
        api = self.state.api
        created = api.create_quiz({"title": draft.title, "description": draft.description,
                                   "category": draft.category, "created_by": created_by})
        if created.get("id") is None:
            raise RemoteError("quiz creation returned no id", body=created)
        quiz_id = created["id"]
        logger.info("Quiz created in DB: %s", quiz_id)
        for question in draft.questions:
            q_res = api.create_question({"quiz_id": quiz_id, "text": question.text, "type": question.type.value})
            if q_res.get("id") is None:
                raise RemoteError("question creation returned no id", body=q_res)
            for i, text in enumerate(question.options):
                api.create_option({"question_id": q_res["id"], "text": text, "is_correct": i in question.correct})
        if draft.published:
            api.update_quiz(quiz_id, published=True)
        return str(quiz_id)

    # ---------- operations ----------
    def validate(self, draft: QuizDraft) -> None:
        if not draft.title.strip() or not draft.questions:
            raise ValidationFailed("Please enter a title and at least one question.")

    def save_quiz(self, draft: QuizDraft) -> SaveResult:
        """Save a draft remotely, or locally if any remote step fails.

        A draft loaded from the local store is removed locally once the remote
        save succeeds, or replaced in place when it fails.

        A draft loaded from the remote store is saved as a new remote quiz and
        the old quiz is deleted, since the API cannot replace questions. The new
        quiz has a new id: attempts recorded against the old id no longer mark
        the edited quiz as attempted.
        """
        self.validate(draft)
        draft = draft.model_copy(update={"title": draft.title.strip()})
        created_by = draft.created_by or self.state.username
        was_local = self._find_local(draft.id) is not None
        try:
            quiz_id = self._create_remote(draft, created_by)
        except RemoteError as e:
            logger.warning(f"API save failed, falling back to local store: {e}")
            local_id = self._save_local(draft, created_by)
            return SaveResult(location=Location.LOCAL, identifier=local_id)
        if was_local:
            self._remove_local(draft.id)
        elif draft.id is not None:
            try:
                self.state.api.delete_quiz(draft.id)
            except RemoteError as e:
                logger.warning(f"Saved {quiz_id} but could not delete replaced quiz {draft.id}: {e}")
        return SaveResult(location=Location.REMOTE, identifier=quiz_id)

    def load_quiz_for_edit(self, quiz_id) -> Optional[QuizDraft]:
        local = self._find_local(quiz_id)
        if local is not None:
            return QuizDraft.model_validate(local)
        api = self.state.api
        try:
            quiz = adapt_quiz(api.get_quiz(quiz_id), Location.REMOTE)
            questions = []
            for raw in api.list_questions(quiz_id):
                question = adapt_question({**raw, "options": api.list_options(raw["id"])})
                questions.append(DraftQuestion.from_question(question))
        except (RemoteError, KeyError) as e:
            logger.warning(f"load_quiz_for_edit failed for {quiz_id}: {e}")
            return None
        return QuizDraft(id=quiz.id, title=quiz.title, description=quiz.description, category=quiz.category,
                         created_by=quiz.created_by, published=quiz.published, location=Location.REMOTE,
                         migrated=True, questions=questions)

    def toggle_publish(self, quiz_id) -> bool:
        """Flip the published flag remotely; on failure flip only the local copy."""
        try:
            current = self.state.api.get_quiz(quiz_id)
            published = not bool(current.get("published"))
            self.state.api.update_quiz(quiz_id, published=published)
            return published
        except RemoteError as e:
            logger.warning(f"Server publish toggle failed, updating local copy only: {e}")
        drafts = self._local_drafts()
        for record in drafts:
            if str(record.get("id")) == str(quiz_id):
                record["published"] = not bool(record.get("published"))
                self.state.store.set(QUIZZES, drafts)
                return record["published"]
        raise NotFound(f"Quiz {quiz_id} not found locally to toggle")

    def delete_quiz(self, quiz_id) -> Location:
        try:
            self.state.api.delete_quiz(quiz_id)
            return Location.REMOTE
        except RemoteError as e:
            logger.warning(f"Server delete failed: {e}")
        self._remove_local(quiz_id)
        return Location.LOCAL

    def republish_quiz(self, quiz_id) -> str:
        drafts = self._local_drafts()
        for record in drafts:
            if str(record.get("id")) == str(quiz_id):
                record["last_updated"] = _now_iso()
                self.state.store.set(QUIZZES, drafts)
                return record["last_updated"]
        raise NotFound(f"Quiz {quiz_id} not found locally; republish on server required")

    def refresh_library(self) -> List[QuizSummary]:
        try:
            self.state.quizzes = adapt_quizzes(self.state.api.list_quizzes(), Location.REMOTE)
        except RemoteError as e:
            logger.warning(f"Library refresh from API failed, using local drafts: {e}")
            self.state.quizzes = adapt_quizzes(self._local_drafts(), Location.LOCAL)
        return self.state.quizzes

    def my_quizzes(self) -> List[QuizSummary]:
        return [q for q in self.state.quizzes if q.created_by == self.state.username]

    def migrate_drafts(self) -> List[SaveResult]:
        """Push every unmigrated local draft to the API while it is reachable."""
        if not self.state.api.health():
            return []
        results = []
        for record in self._local_drafts():
            draft = QuizDraft.model_validate(record)
            if draft.migrated:
                continue
            try:
                quiz_id = self._create_remote(draft, draft.created_by)
            except RemoteError as e:
                logger.warning(f"Migration of draft {draft.id} failed, keeping it local: {e}")
                continue
            self._remove_local(draft.id)
            logger.info("Migrated draft %s -> %s", draft.id, quiz_id)
            results.append(SaveResult(location=Location.REMOTE, identifier=quiz_id))
        return results


def build_draft(title: str, questions: List[Dict[str, Any]], description: str = "", category: str = "",
                quiz_id=None) -> QuizDraft:
    """Build a draft from form data, one dict per question card
    (``text``, ``type``, ``options`` as strings, ``correct`` as indices)."""
    return QuizDraft(id=quiz_id, title=title, description=description, category=category,
                     questions=[DraftQuestion(text=q.get("text", ""), type=QuestionType(q.get("type") or "single"),
                                              options=list(q.get("options") or []),
                                              correct=[int(i) for i in q.get("correct") or []])
                                for q in questions])
