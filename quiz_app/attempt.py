"""Quiz attempt state: collected answers, countdown and auto-submit."""

from typing import Callable, Dict, List, Optional

from quiz_app.scoring import normalize_answer


class CountdownTimer:
    """Countdown that fires ``on_expire`` once when it reaches zero."""

    def __init__(self, seconds: int, on_expire: Callable[[], object]):
        self.remaining = max(int(seconds), 0)
        self.on_expire = on_expire
        self.cancelled = False
        self.expired = False

    @classmethod
    def for_quiz(cls, quiz, on_expire) -> Optional["CountdownTimer"]:
        if not quiz.time_limit:
            return None
        return cls(quiz.time_limit * 60, on_expire)

    @property
    def running(self) -> bool:
        return not (self.cancelled or self.expired)

    def tick(self):
        """Advance the countdown by one second."""
        self.advance(1)

    def advance(self, seconds: int):
        """Advance the countdown by ``seconds`` at once."""
        if not self.running or seconds <= 0:
            return
        self.remaining -= min(seconds, self.remaining)
        if self.remaining <= 0:
            self.remaining = 0
            self.expired = True
            self.on_expire()

    def cancel(self):
        self.cancelled = True


class AttemptClosed(Exception):
    pass


class QuizAttempt:
    """A single attempt at a quiz.

    Answers are collected until the attempt is submitted, either manually or
    by the countdown running out. ``on_submit(answers, time_spent,
    auto_submitted)`` is called exactly once; its return value is kept as
    the attempt result.
    """

    def __init__(self, quiz, on_submit: Callable[[Dict[str, List[str]], int, bool], object]):
        self.quiz = quiz
        self.on_submit = on_submit
        self.answers: Dict[str, List[str]] = {}
        self.elapsed = 0
        self.submitted = False
        self.auto_submitted = False
        self.result = None
        self.timer = CountdownTimer.for_quiz(quiz, self._expire)

    @property
    def time_left(self) -> Optional[int]:
        return self.timer.remaining if self.timer else None

    def answer(self, question_uid: str, value):
        if self.submitted:
            raise AttemptClosed("This attempt has already been submitted.")
        self.answers[str(question_uid)] = normalize_answer(value)

    def tick(self):
        if self.submitted:
            return
        self.elapsed += 1
        if self.timer:
            self.timer.tick()

    def advance(self, seconds: int):
        """Let ``seconds`` pass, stopping at the time limit if the countdown submits."""
        if self.submitted:
            return
        seconds = max(int(seconds), 0)
        if self.timer is not None:
            seconds = min(seconds, self.timer.remaining)
        self.elapsed += seconds
        if self.timer:
            self.timer.advance(seconds)

    def _expire(self):
        self.auto_submitted = True
        self.submit()

    def submit(self):
        if self.submitted:
            return self.result
        self.submitted = True
        if self.timer:
            self.timer.cancel()
        self.result = self.on_submit(dict(self.answers), self.elapsed, self.auto_submitted)
        return self.result
