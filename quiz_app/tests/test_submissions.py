import pytest

from core.errors import QuizAppError
from quiz_app.api.services import SubmissionService
from quiz_app.models import Quiz, Submission

pytestmark = pytest.mark.django_db


def submit(client, quiz, answers, **extra):
    return client.post(f"/api/quizzes/{quiz.pk}/submit/", {"answers": answers, **extra}, format="json")


def test_all_correct_true_false_quiz_scores_full_marks(client_for, student, true_false_quiz):
    res = submit(client_for(student), true_false_quiz, {"t1": "o1", "t2": ["o2"]}, time_spent=42)

    assert res.status_code == 201
    body = res.json()
    assert body["score"] == 100
    assert body["points_awarded"] == 20
    assert body["total_points"] == 20
    assert body["time_spent"] == 42
    assert body["auto_submitted"] is False
    assert body["quiz_title"] == "Facts"
    assert body["answers"] == {"t1": ["o1"], "t2": ["o2"]}


def test_all_wrong_true_false_quiz_scores_zero(client_for, student, true_false_quiz):
    res = submit(client_for(student), true_false_quiz, {"t1": "o2", "t2": "o1"})

    assert res.json()["score"] == 0
    assert res.json()["points_awarded"] == 0


def test_free_text_questions_count_towards_total(client_for, student, published_quiz):
    res = submit(client_for(student), published_quiz, {"q1": "o2", "q2": "o1", "q3": "Paris"})

    assert res.json()["points_awarded"] == 20
    assert res.json()["total_points"] == 30
    assert res.json()["score"] == 66.67


def test_unknown_question_ids_are_ignored(client_for, student, true_false_quiz):
    res = submit(client_for(student), true_false_quiz, {"t1": "o1", "nope": "o1"})

    assert res.status_code == 201
    assert res.json()["answers"] == {"t1": ["o1"]}
    assert res.json()["score"] == 50


def test_submission_increments_counter(client_for, make_user, true_false_quiz):
    submit(client_for(make_user("a")), true_false_quiz, {})
    submit(client_for(make_user("b")), true_false_quiz, {})

    assert Quiz.objects.get(pk=true_false_quiz.pk).submission_count == 2


def test_second_attempt_is_refused_without_retakes(client_for, student, true_false_quiz):
    client = client_for(student)
    submit(client, true_false_quiz, {"t1": "o1"})

    res = submit(client, true_false_quiz, {"t1": "o1", "t2": "o2"})

    assert res.status_code == 409
    assert res.json()["code"] == "db/already-exists"
    assert res.json()["message"] == "You have already submitted this quiz."
    assert Submission.objects.filter(user=student).count() == 1


def test_retakes_are_allowed_when_enabled(client_for, student, teacher, true_false_payload, create_quiz):
    quiz = create_quiz(teacher, true_false_payload, is_published=True, allow_retakes=True)
    client = client_for(student)

    submit(client, quiz, {"t1": "o2"})
    res = submit(client, quiz, {"t1": "o1", "t2": "o2"})

    assert res.status_code == 201
    assert Submission.objects.filter(user=student, quiz=quiz).count() == 2


def test_unpublished_quiz_cannot_be_submitted(client_for, student, quiz):
    res = submit(client_for(student), quiz, {"q1": "o2"})

    assert res.status_code == 404
    assert not Submission.objects.exists()


def test_overdue_attempt_is_auto_submitted_at_the_limit(student, teacher, true_false_payload, create_quiz):
    quiz = create_quiz(teacher, true_false_payload, is_published=True, time_limit=1)

    submission = SubmissionService.submit(student, quiz, {"t1": "o1"}, time_spent=300)

    assert submission.auto_submitted is True
    assert submission.time_spent == 60
    assert submission.score == 50


def test_service_rejects_submission_to_hidden_quiz(student, quiz):
    with pytest.raises(QuizAppError) as exc:
        SubmissionService.submit(student, quiz, {})

    assert exc.value.code == "db/not-found"


def test_submission_history_is_newest_first(client_for, student, teacher, true_false_payload, create_quiz):
    first = create_quiz(teacher, true_false_payload, is_published=True)
    second = create_quiz(teacher, {**true_false_payload, "title": "More facts"}, is_published=True)
    client = client_for(student)
    submit(client, first, {})
    submit(client, second, {})

    res = client.get("/api/submissions/")

    assert res.status_code == 200
    assert [s["quiz_title"] for s in res.json()] == ["More facts", "Facts"]


def test_history_survives_quiz_deletion(client_for, student, true_false_quiz):
    client = client_for(student)
    submit(client, true_false_quiz, {"t1": "o1"})
    true_false_quiz.delete()

    res = client.get("/api/submissions/")

    assert res.json()[0]["quiz"] is None
    assert res.json()[0]["quiz_title"] == "Facts"


class TestAnswerKey:
    def url(self, quiz):
        return f"/api/quizzes/{quiz.pk}/answers/"

    def test_owner_always_sees_answers(self, client_for, teacher, quiz):
        res = client_for(teacher).get(self.url(quiz))

        assert res.status_code == 200
        assert res.json()["questions"][0]["correct_answer"] == ["o2"]

    def test_student_needs_a_submission_first(self, client_for, student, teacher, true_false_payload, create_quiz):
        quiz = create_quiz(teacher, true_false_payload, is_published=True, show_correct_answers=True)
        client = client_for(student)

        assert client.get(self.url(quiz)).status_code == 403
        submit(client, quiz, {"t1": "o1"})
        assert client.get(self.url(quiz)).status_code == 200

    def test_hidden_answers_stay_hidden_after_submitting(self, client_for, student, true_false_quiz):
        client = client_for(student)
        submit(client, true_false_quiz, {"t1": "o1"})

        res = client.get(self.url(true_false_quiz))

        assert res.status_code == 403
        assert res.json()["code"] == "db/permission-denied"


def test_oversized_time_spent_is_rejected(client_for, student, true_false_quiz):
    res = submit(client_for(student), true_false_quiz, {"t1": "o1"}, time_spent=10 ** 20)

    assert res.status_code == 400
    assert res.json()["code"] == "db/invalid-argument"
    assert "time_spent" in res.json()["detail"]
    assert not Submission.objects.exists()


def test_retake_check_is_repeated_when_saving(student, true_false_quiz):
    questions = list(true_false_quiz.questions.all())
    SubmissionService.submit(student, true_false_quiz, {"t1": "o1"})

    with pytest.raises(QuizAppError) as exc:
        SubmissionService._save(student, true_false_quiz, questions, {"t1": ["o1"]}, 5, False)

    assert exc.value.code == "db/already-exists"
    assert Submission.objects.filter(user=student).count() == 1
