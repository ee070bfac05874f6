import pytest

from conftest import T0, USER
from deckcore.errors import ConflictError, GradingError, InvalidInputError, NotFoundError
from deckcore.grading import MockGrader
from deckcore.study import api


def test_session_payload_shape(deck_id, card_id):
    payload = api.get_deck_session(USER, deck_id, now=T0)

    assert payload["deck"] == {"id": deck_id, "title": "Biology"}
    assert payload["dueNowCount"] == 1
    assert payload["nextDueAt"] is None
    assert payload["cards"] == [{
        "id": card_id,
        "question": "What is the mitochondria?",
        "answer": "Powerhouse of the cell",
        "scheduleState": None,
    }]


def test_session_limit_from_query_string(deck_id, make_card):
    for _ in range(3):
        make_card(deck_id)

    payload = api.get_deck_session(USER, deck_id, limit="2", now=T0)

    assert len(payload["cards"]) == 2
    assert payload["dueNowCount"] == 3


@pytest.mark.parametrize("limit", [0, 101, "many"])
def test_session_limit_out_of_range(deck_id, limit):
    with pytest.raises(InvalidInputError):
        api.get_deck_session(USER, deck_id, limit=limit, now=T0)


def test_session_rejects_blank_deck_id():
    with pytest.raises(InvalidInputError):
        api.get_deck_session(USER, "  ", now=T0)


def test_review_payload_shape(deck_id, card_id):
    payload = api.post_review(USER, {"cardId": card_id, "rating": "GOOD"}, now=T0)

    assert payload["cardId"] == card_id
    assert payload["rating"] == "GOOD"

    state = payload["scheduleState"]
    assert state["dueAt"] == "2025-03-03T09:10:00+00:00"
    assert state["lastReviewedAt"] == "2025-03-03T09:00:00+00:00"
    assert state["intervalMinutes"] == 10
    assert state["repetitions"] == 1
    assert state["fsrsState"] == 1
    assert state["fsrsLearningSteps"] == 1

    review = payload["review"]
    assert review["rating"] == "GOOD"
    assert review["deckId"] == deck_id
    assert review["previousDueAt"] is None
    assert review["previousInterval"] == 0
    assert review["nextInterval"] == 10
    assert review["scheduledDueAt"] == state["dueAt"]


@pytest.mark.parametrize("body", [
    None,
    {"rating": "GOOD"},
    {"cardId": "", "rating": "GOOD"},
    {"cardId": "abc", "rating": "good"},
    {"cardId": "abc", "rating": 3},
    {"cardId": "x" * 65, "rating": "GOOD"},
])
def test_review_request_validation(body):
    with pytest.raises(InvalidInputError):
        api.post_review(USER, body, now=T0)


def test_review_of_unknown_card():
    with pytest.raises(NotFoundError):
        api.post_review(USER, {"cardId": "missing", "rating": "EASY"}, now=T0)


def test_grade_payload_shape(card_id):
    body = {"cardId": card_id, "userAnswer": "powerhouse of the cell"}

    payload = api.post_grade(USER, body, now=T0, grader=MockGrader())

    assert payload["score"] == 100
    assert payload["rating"] == "EASY"
    assert payload["idealAnswer"] == "Powerhouse of the cell"
    assert payload["scheduleState"]["fsrsState"] == 2
    assert payload["review"]["rating"] == "EASY"


def test_grade_rejects_long_history(card_id):
    history = [{"role": "user", "content": "again"}] * 21
    body = {"cardId": card_id, "userAnswer": "cell", "history": history}

    with pytest.raises(InvalidInputError):
        api.post_grade(USER, body, now=T0, grader=MockGrader())


def test_grade_rejects_unknown_role(card_id):
    body = {"cardId": card_id, "userAnswer": "cell", "history": [{"role": "system", "content": "x"}]}

    with pytest.raises(InvalidInputError):
        api.post_grade(USER, body, now=T0, grader=MockGrader())


def test_follow_up_payload(card_id):
    body = {"cardId": card_id, "message": "What does that mean?"}

    payload = api.post_follow_up(USER, body, grader=MockGrader())

    assert payload["cardId"] == card_id
    assert "What does that mean?" in payload["assistantReply"]


@pytest.mark.parametrize("error, status", [
    (InvalidInputError("bad"), 400),
    (NotFoundError("Card", "c1"), 404),
    (ConflictError("c1"), 409),
    (GradingError("down"), 502),
])
def test_error_payload(error, status):
    code, body = api.error_payload(error)

    assert code == status
    assert body == {"error": str(error)}
