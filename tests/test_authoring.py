import pytest

from quizhub.client.authoring import QuizAuthoring, build_draft
from quizhub.client.errors import NotFound, ValidationFailed
from quizhub.client.schemas import Location
from quizhub.client.store import QUIZZES


def math_draft(**kw):
    return build_draft("Math", [{"text": "2+2?", "type": "single", "options": ["3", "4"], "correct": [1]}], **kw)


def test_save_quiz_remote(state, remote):
    result = QuizAuthoring(state).save_quiz(math_draft())
    assert result.location == Location.REMOTE
    quiz = remote.quizzes[int(result.identifier)]
    assert quiz["title"] == "Math" and quiz["created_by"] == "tess"
    (question,) = remote.questions_of(result.identifier)
    assert question["text"] == "2+2?"
    assert [(o["text"], o["is_correct"]) for o in remote.options_of(question["id"])] == [("3", 0), ("4", 1)]
    assert state.store.get(QUIZZES) is None


def test_save_quiz_local_when_unreachable(state, remote):
    remote.down = True
    result = QuizAuthoring(state).save_quiz(math_draft())
    assert result.location == Location.LOCAL and result.identifier.startswith("q_")
    (record,) = state.store.get(QUIZZES)
    assert record["id"] == result.identifier
    assert record["location"] == "local" and record["migrated"] is False and record["published"] is False
    assert record["questions"] == [{"text": "2+2?", "type": "single", "options": ["3", "4"], "correct": [1]}]


def test_partial_remote_failure_keeps_remote_quiz_and_saves_locally(state, remote):
    remote.fail.add("POST /api/questions")
    result = QuizAuthoring(state).save_quiz(math_draft())
    assert result.location == Location.LOCAL
    assert [q["title"] for q in remote.quizzes.values()] == ["Math"]
    assert remote.questions == {}
    assert state.store.get(QUIZZES)[0]["questions"][0]["options"] == ["3", "4"]


def test_failure_aborts_remaining_steps(state, remote):
    remote.fail.add("POST /api/options")
    draft = build_draft("Two", [{"text": "a", "options": ["x"], "correct": [0]},
                                {"text": "b", "options": ["y"], "correct": [0]}])
    QuizAuthoring(state).save_quiz(draft)
    assert remote.calls.count("POST /api/questions") == 1
    assert remote.calls.count("POST /api/options") == 1


@pytest.mark.parametrize("title, questions", [("", [{"text": "q"}]), ("   ", [{"text": "q"}]), ("Math", [])])
def test_validation_has_no_side_effects(state, remote, title, questions):
    with pytest.raises(ValidationFailed):
        QuizAuthoring(state).save_quiz(build_draft(title, questions))
    assert remote.calls == [] and state.store.get(QUIZZES) is None


def test_local_draft_is_edited_in_place_then_migrated(state, remote):
    authoring = QuizAuthoring(state)
    remote.down = True
    local_id = authoring.save_quiz(math_draft()).identifier
    draft = authoring.load_quiz_for_edit(local_id)
    assert draft.id == local_id and draft.questions[0].correct == [1]

    again = authoring.save_quiz(draft.model_copy(update={"title": "Math v2"}))
    assert again.identifier == local_id
    assert [r["title"] for r in state.store.get(QUIZZES)] == ["Math v2"]

    remote.down = False
    saved = authoring.save_quiz(authoring.load_quiz_for_edit(local_id))
    assert saved.location == Location.REMOTE
    assert state.store.get(QUIZZES) == []


def test_load_remote_quiz_for_edit(state, remote):
    authoring = QuizAuthoring(state)
    quiz_id = authoring.save_quiz(math_draft(category="maths")).identifier
    draft = authoring.load_quiz_for_edit(quiz_id)
    assert (draft.id, draft.title, draft.category, draft.location) == (quiz_id, "Math", "maths", Location.REMOTE)
    assert draft.questions[0].options == ["3", "4"] and draft.questions[0].correct == [1]


def test_load_for_edit_missing_everywhere(state, remote):
    assert QuizAuthoring(state).load_quiz_for_edit(999) is None


def test_saving_remote_edit_replaces_old_quiz(state, remote):
    authoring = QuizAuthoring(state)
    old_id = authoring.save_quiz(math_draft()).identifier
    draft = authoring.load_quiz_for_edit(old_id)
    new_id = authoring.save_quiz(draft.model_copy(update={"title": "Math 2"})).identifier
    assert new_id != old_id
    assert [q["title"] for q in remote.quizzes.values()] == ["Math 2"]


def test_toggle_publish_remote(state, remote):
    authoring = QuizAuthoring(state)
    quiz_id = authoring.save_quiz(math_draft()).identifier
    assert authoring.toggle_publish(quiz_id) is True
    assert remote.quizzes[int(quiz_id)]["published"] is True
    assert authoring.toggle_publish(quiz_id) is False


def test_toggle_publish_falls_back_to_local_copy(state, remote):
    authoring = QuizAuthoring(state)
    remote.down = True
    local_id = authoring.save_quiz(math_draft()).identifier
    assert authoring.toggle_publish(local_id) is True
    assert state.store.get(QUIZZES)[0]["published"] is True
    with pytest.raises(NotFound):
        authoring.toggle_publish("q_missing")


def test_delete_quiz_remote_and_local(state, remote):
    authoring = QuizAuthoring(state)
    quiz_id = authoring.save_quiz(math_draft()).identifier
    assert authoring.delete_quiz(quiz_id) == Location.REMOTE
    assert remote.quizzes == {}
    remote.down = True
    local_id = authoring.save_quiz(math_draft()).identifier
    assert authoring.delete_quiz(local_id) == Location.LOCAL
    assert state.store.get(QUIZZES) == []


def test_republish_bumps_local_timestamp(state, remote):
    authoring = QuizAuthoring(state)
    remote.down = True
    local_id = authoring.save_quiz(math_draft()).identifier
    before = state.store.get(QUIZZES)[0]["last_updated"]
    stamp = authoring.republish_quiz(local_id)
    assert stamp >= before
    with pytest.raises(NotFound):
        authoring.republish_quiz("q_missing")


def test_refresh_library_and_my_quizzes(state, remote):
    authoring = QuizAuthoring(state)
    authoring.save_quiz(math_draft())
    authoring.save_quiz(math_draft().model_copy(update={"title": "Theirs", "created_by": "someone"}))
    assert [q.title for q in authoring.refresh_library()] == ["Math", "Theirs"]
    assert [q.title for q in authoring.my_quizzes()] == ["Math"]

    remote.down = True
    authoring.save_quiz(math_draft().model_copy(update={"title": "Offline"}))
    assert [(q.title, q.location) for q in authoring.refresh_library()] == [("Offline", Location.LOCAL)]


def test_migrate_drafts(state, remote):
    authoring = QuizAuthoring(state)
    remote.down = True
    authoring.save_quiz(math_draft())
    authoring.save_quiz(math_draft().model_copy(update={"title": "Second"}))
    assert authoring.migrate_drafts() == []

    remote.down = False
    results = authoring.migrate_drafts()
    assert [r.location for r in results] == [Location.REMOTE, Location.REMOTE]
    assert sorted(q["title"] for q in remote.quizzes.values()) == ["Math", "Second"]
    assert state.store.get(QUIZZES) == []


def test_migrate_keeps_failed_drafts(state, remote):
    authoring = QuizAuthoring(state)
    remote.down = True
    local_id = authoring.save_quiz(math_draft()).identifier
    remote.down = False
    remote.fail.add("POST /api/options")
    assert authoring.migrate_drafts() == []
    assert [r["id"] for r in state.store.get(QUIZZES)] == [local_id]


def test_refresh_library_skips_malformed_rows(state, remote):
    authoring = QuizAuthoring(state)
    authoring.save_quiz(math_draft())
    remote.quizzes[99] = {"title": "no id"}
    assert [q.title for q in authoring.refresh_library()] == ["Math"]

    remote.down = True
    state.store.set(QUIZZES, [{"title": "no id either"}, {"id": "q_1", "title": "Offline", "questions": []}])
    assert [q.id for q in authoring.refresh_library()] == ["q_1"]
