from types import SimpleNamespace

import pytest

from quiz_app.attempt import AttemptClosed, CountdownTimer, QuizAttempt


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, answers, time_spent, auto_submitted):
        self.calls.append((answers, time_spent, auto_submitted))
        return len(self.calls)


def test_countdown_is_only_created_for_timed_quizzes():
    assert CountdownTimer.for_quiz(SimpleNamespace(time_limit=None), lambda: None) is None
    assert CountdownTimer.for_quiz(SimpleNamespace(time_limit=2), lambda: None).remaining == 120


def test_expired_countdown_submits_exactly_once():
    recorder = Recorder()
    attempt = QuizAttempt(SimpleNamespace(time_limit=1), on_submit=recorder)
    attempt.answer("q1", "o2")

    for _ in range(60):
        attempt.tick()

    assert recorder.calls == [({"q1": ["o2"]}, 60, True)]
    assert attempt.time_left == 0

    attempt.tick()
    attempt.advance(30)
    assert attempt.submit() == 1
    assert len(recorder.calls) == 1


def test_manual_submit_stops_the_countdown():
    recorder = Recorder()
    attempt = QuizAttempt(SimpleNamespace(time_limit=1), on_submit=recorder)

    attempt.advance(10)
    attempt.submit()
    attempt.advance(120)

    assert recorder.calls == [({}, 10, False)]
    assert not attempt.timer.running


def test_advance_stops_at_the_time_limit():
    recorder = Recorder()
    attempt = QuizAttempt(SimpleNamespace(time_limit=1), on_submit=recorder)

    attempt.advance(500)

    assert attempt.submitted
    assert recorder.calls[0][1:] == (60, True)


def test_untimed_attempt_never_auto_submits():
    recorder = Recorder()
    attempt = QuizAttempt(SimpleNamespace(time_limit=None), on_submit=recorder)

    attempt.advance(5000)

    assert recorder.calls == []
    assert attempt.time_left is None
    assert attempt.elapsed == 5000


def test_answers_are_rejected_after_submit():
    attempt = QuizAttempt(SimpleNamespace(time_limit=None), on_submit=Recorder())
    attempt.submit()

    with pytest.raises(AttemptClosed):
        attempt.answer("q1", "o1")


def test_long_reports_jump_straight_to_the_limit():
    recorder = Recorder()
    attempt = QuizAttempt(SimpleNamespace(time_limit=100000), on_submit=recorder)

    attempt.advance(10 ** 12)

    assert recorder.calls == [({}, 6000000, True)]
    assert attempt.time_left == 0


def test_countdown_advance_fires_once():
    fired = []
    timer = CountdownTimer(90, lambda: fired.append(True))

    timer.advance(30)
    assert timer.remaining == 60 and fired == []

    timer.advance(500)
    timer.advance(5)
    assert timer.remaining == 0
    assert fired == [True]
