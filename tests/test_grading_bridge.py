import pytest

from conftest import OTHER_USER, T0, USER
from deckcore import fsrs
from deckcore.errors import GradingError, NotFoundError
from deckcore.fsrs import Rating
from deckcore.grading import GradeResult, StudyGrader, provider
from deckcore.study import grading_bridge
from deckcore.study.grading_bridge import grade_and_review, score_to_rating
from deckcore.study.review_applier import submit_review


class FixedGrader(StudyGrader):
    def __init__(self, score=90, error=None):
        self.score = score
        self.error = error
        self.calls = []

    def grade_answer(self, question, expected_answer, user_answer, history=()):
        self.calls.append((question, expected_answer, user_answer, list(history)))
        if self.error is not None:
            raise self.error
        return GradeResult(
            score=self.score,
            feedback="Close enough.",
            ideal_answer=expected_answer,
            assistant_reply=f"Score: {self.score}/100.",
        )

    def follow_up(self, question, expected_answer, message, history=(),
                  user_answer=None, feedback=None, ideal_answer=None):
        return f"About {question}: {message}"


@pytest.mark.parametrize("score, rating", [
    (0, Rating.AGAIN),
    (39, Rating.AGAIN),
    (40, Rating.HARD),
    (59, Rating.HARD),
    (60, Rating.GOOD),
    (84, Rating.GOOD),
    (85, Rating.EASY),
    (100, Rating.EASY),
])
def test_score_to_rating(score, rating):
    assert score_to_rating(score) == rating


@pytest.mark.parametrize("score", [-1, 101, 50.5, True, None, "80"])
def test_score_out_of_range(score):
    with pytest.raises(GradingError):
        score_to_rating(score)


def test_graded_review_matches_self_graded(deck_id, make_card):
    graded_card = make_card(deck_id)
    rated_card = make_card(deck_id)

    graded = grade_and_review(USER, graded_card, "mitochondria", now=T0, grader=FixedGrader(90))
    rated = submit_review(USER, rated_card, Rating.EASY, now=T0)

    assert graded.rating == Rating.EASY
    assert graded.score == 90
    assert graded.outcome.review.rating == Rating.EASY

    ours, theirs = graded.outcome.schedule_state, rated.schedule_state
    assert ours.due_at == theirs.due_at
    assert ours.interval_minutes == theirs.interval_minutes
    assert ours.fsrs_state == theirs.fsrs_state
    assert ours.fsrs_stability == theirs.fsrs_stability
    assert ours.fsrs_difficulty == theirs.fsrs_difficulty


def test_grader_receives_card_text_and_history(card_id):
    grader = FixedGrader(50)
    history = [{"role": "user", "content": "hint please"}]

    graded = grade_and_review(USER, card_id, "energy", history=history, now=T0, grader=grader)

    assert graded.rating == Rating.HARD
    question, expected, answer, sent_history = grader.calls[0]
    assert question == "What is the mitochondria?"
    assert expected == "Powerhouse of the cell"
    assert answer == "energy"
    assert sent_history == history


def test_grading_failure_leaves_schedule_untouched(card_id):
    grader = FixedGrader(error=GradingError("upstream timeout"))

    with pytest.raises(GradingError):
        grade_and_review(USER, card_id, "energy", now=T0, grader=grader)

    assert fsrs.get_review_history(USER) == []
    assert fsrs.get_schedule_rows(USER) == []


def test_unowned_card_is_rejected_before_grading(card_id):
    grader = FixedGrader()

    with pytest.raises(NotFoundError):
        grade_and_review(OTHER_USER, card_id, "energy", now=T0, grader=grader)

    assert grader.calls == []


def test_default_grader_is_mock_without_api_key(card_id):
    graded = grade_and_review(USER, card_id, "The powerhouse of the cell!", now=T0)

    assert graded.score == 100
    assert graded.rating == Rating.EASY
    assert graded.ideal_answer == "Powerhouse of the cell"


def test_follow_up_never_schedules(card_id):
    reply = grading_bridge.follow_up(USER, card_id, "Why?", grader=FixedGrader())

    assert reply == "About What is the mitochondria?: Why?"
    assert fsrs.get_review_history(USER) == []


def test_unconfigured_openai_grader_leaves_schedule_untouched(card_id, monkeypatch):
    monkeypatch.setenv("GRADING_PROVIDER", "openai")
    monkeypatch.setattr(provider, "_client", None)

    with pytest.raises(GradingError):
        grade_and_review(USER, card_id, "energy", now=T0)

    assert fsrs.get_schedule_rows(USER) == []
