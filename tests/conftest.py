import json
import re

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quizhub.client.api_client import QuizApiClient
from quizhub.client.schemas import CurrentUser
from quizhub.client.state import AppState
from quizhub.client.store import LocalStore
from quizhub.core.database import get_db, init_db
from quizhub.main import app


@pytest.fixture
def session_factory():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def live_api(client):
    """A QuizApiClient wired straight into the FastAPI app."""
    return QuizApiClient(http=TestClient(app, base_url="http://testserver/api"))


class FakeRemote:
    """In-memory stand-in for the REST API, served through httpx.MockTransport.

    ``down`` makes every request fail at the transport level; ``fail`` holds
    "METHOD /path-regex" rules that answer 500 instead.
    """

    def __init__(self):
        self.quizzes, self.questions, self.options = {}, {}, {}
        self.results = []
        self.down = False
        self.fail = set()
        self.calls = []
        self._next = 0

    def _id(self):
        self._next += 1
        return self._next

    def handler(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.calls.append(f"{method} {path}")
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)
        for rule in self.fail:
            rule_method, rule_path = rule.split(" ", 1)
            if rule_method == method and re.fullmatch(rule_path, path):
                return httpx.Response(500, json={"error": "server error"})
        body = json.loads(request.content) if request.content else {}

        if path == "/api/health":
            return httpx.Response(200, json={"ok": True})
        if path == "/api/quizzes" and method == "GET":
            return httpx.Response(200, json=list(self.quizzes.values()))
        if path == "/api/quizzes" and method == "POST":
            quiz = {"id": self._id(), "title": body["title"], "description": body.get("description"),
                    "category": body.get("category"), "published": 0, "created_by": body.get("created_by")}
            self.quizzes[quiz["id"]] = quiz
            return httpx.Response(201, json=quiz)
        if path == "/api/questions" and method == "POST":
            question = {"id": self._id(), "quiz_id": body["quiz_id"], "text": body.get("text"),
                        "type": body.get("type", "single")}
            self.questions[question["id"]] = question
            return httpx.Response(201, json=question)
        if path == "/api/options" and method == "POST":
            option = {"id": self._id(), "question_id": body["question_id"], "text": body.get("text"),
                      "is_correct": 1 if body.get("is_correct") else 0}
            self.options[option["id"]] = option
            return httpx.Response(201, json=option)

        if path == "/api/results" and method == "POST":
            self.results.append(body)
            return httpx.Response(201, json={"id": len(self.results), **body})

        m = re.fullmatch(r"/api/quizzes/(\d+)/questions", path)
        if m:
            qid = int(m.group(1))
            return httpx.Response(200, json=[q for q in self.questions.values() if q["quiz_id"] == qid])
        m = re.fullmatch(r"/api/questions/(\d+)/options", path)
        if m:
            qid = int(m.group(1))
            return httpx.Response(200, json=[o for o in self.options.values() if o["question_id"] == qid])
        m = re.fullmatch(r"/api/quizzes/(\d+)", path)
        if m:
            quiz = self.quizzes.get(int(m.group(1)))
            if method == "DELETE":
                self.quizzes.pop(int(m.group(1)), None)
                return httpx.Response(200, json={"ok": True})
            if quiz is None:
                return httpx.Response(404, json={"error": "not found"})
            if method == "PATCH":
                quiz.update(body)
            return httpx.Response(200, json=quiz)
        return httpx.Response(422, json={"error": "validation error"})

    def questions_of(self, quiz_id):
        return [q for q in self.questions.values() if q["quiz_id"] == int(quiz_id)]

    def options_of(self, question_id):
        return [o for o in self.options.values() if o["question_id"] == question_id]


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def store(tmp_path):
    return LocalStore(str(tmp_path / "store.json"))


@pytest.fixture
def state(remote, store):
    http = httpx.Client(transport=httpx.MockTransport(remote.handler), base_url="http://remote.test/api")
    return AppState(store=store, api=QuizApiClient(http=http),
                    current_user=CurrentUser(id=1, username="tess", role="teacher"))
