"""
Thin REST client for the quiz API.

Every failure mode (transport error, non-success status, body that is not the
JSON shape the endpoint promises) surfaces as a single ``RemoteError`` so the
callers can treat them all as "use the local source instead".
"""
import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from quizhub.client.errors import RemoteError
from quizhub.core.config import settings

logger = logging.getLogger(__name__)

QuizId = Union[int, str]

_UNSET = object()


class QuizApiClient:
    def __init__(self, base_url: Optional[str] = None, timeout: Any = _UNSET, http: Optional[httpx.Client] = None):
        if http is None:
            http = httpx.Client(base_url=base_url or settings.API_BASE_URL,
                                timeout=settings.API_TIMEOUT if timeout is _UNSET else timeout)
        self.http = http

    def close(self) -> None:
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        try:
            r = self.http.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise RemoteError(f"{method} {path} failed: {e}") from e
        try:
            body = r.json() if r.content else {}
        except ValueError:
            if r.is_success:
                raise RemoteError(f"{method} {path} returned a malformed body", status=r.status_code, body=r.text)
            body = {"text": r.text}
        if not r.is_success:
            raise RemoteError(f"{method} {path} -> HTTP {r.status_code}", status=r.status_code, body=body)
        return body

    def _list(self, path: str) -> List[Dict[str, Any]]:
        body = self._request("GET", path)
        if not isinstance(body, list):
            raise RemoteError(f"GET {path} did not return a list", body=body)
        return body

    def _object(self, method: str, path: str, json: Any = None) -> Dict[str, Any]:
        body = self._request(method, path, json=json)
        if not isinstance(body, dict):
            raise RemoteError(f"{method} {path} did not return an object", body=body)
        return body

    def health(self) -> bool:
        """Liveness probe; never raises."""
        try:
            self._request("GET", "/health")
            return True
        except RemoteError as e:
            logger.debug("API health probe failed: %s", e)
            return False

    # quizzes
    def list_quizzes(self) -> List[Dict[str, Any]]:
        return self._list("/quizzes")

    def get_quiz(self, quiz_id: QuizId) -> Dict[str, Any]:
        return self._object("GET", f"/quizzes/{quiz_id}")

    def create_quiz(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._object("POST", "/quizzes", payload)

    def update_quiz(self, quiz_id: QuizId, **fields) -> Dict[str, Any]:
        return self._object("PATCH", f"/quizzes/{quiz_id}", fields)

    def delete_quiz(self, quiz_id: QuizId) -> Dict[str, Any]:
        return self._object("DELETE", f"/quizzes/{quiz_id}")

    def list_questions(self, quiz_id: QuizId) -> List[Dict[str, Any]]:
        return self._list(f"/quizzes/{quiz_id}/questions")

    # questions / options
    def create_question(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._object("POST", "/questions", payload)

    def list_options(self, question_id: QuizId) -> List[Dict[str, Any]]:
        return self._list(f"/questions/{question_id}/options")

    def create_option(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._object("POST", "/options", payload)

    # auth
    def register(self, username: str, password: str, role: str = "student") -> Dict[str, Any]:
        return self._object("POST", "/auth/register", {"username": username, "password": password, "role": role})

    def login(self, username: str, password: str) -> Dict[str, Any]:
        return self._object("POST", "/auth/login", {"username": username, "password": password})

    # results
    def submit_result(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._object("POST", "/results", payload)

    def list_results(self, user_id: Optional[QuizId] = None) -> List[Dict[str, Any]]:
        return self._list("/results" if user_id is None else f"/results?user_id={user_id}")
