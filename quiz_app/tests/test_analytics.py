import pytest

from quiz_app.api.services import AnalyticsService, SubmissionService

pytestmark = pytest.mark.django_db


@pytest.fixture
def graded_quiz(make_user, true_false_quiz):
    SubmissionService.submit(make_user("ann"), true_false_quiz, {"t1": "o1", "t2": "o2"}, time_spent=30)
    SubmissionService.submit(make_user("bob"), true_false_quiz, {"t1": "o2", "t2": "o1"}, time_spent=60)
    SubmissionService.submit(make_user("cat"), true_false_quiz, {"t1": "o1", "t2": "o1"}, time_spent=90)
    return true_false_quiz


@pytest.mark.parametrize("score,bucket", [(0, "0-20%"), (20, "0-20%"), (20.5, "21-40%"), (60, "41-60%"), (80, "61-80%"), (100, "81-100%")])
def test_score_buckets(score, bucket):
    assert AnalyticsService.bucket(score) == bucket


def test_quiz_results_aggregate_submissions(graded_quiz):
    results = AnalyticsService.quiz_results(graded_quiz, graded_quiz.submissions.all())

    assert results["total_submissions"] == 3
    assert results["total_points"] == 20
    assert results["average_score"] == 50
    assert results["average_time_spent"] == 60
    assert results["passed"] == 1
    assert results["score_distribution"] == [
        {"name": "0-20%", "count": 1},
        {"name": "21-40%", "count": 0},
        {"name": "41-60%", "count": 1},
        {"name": "61-80%", "count": 0},
        {"name": "81-100%", "count": 1},
    ]


def test_question_difficulty_follows_correct_ratio(graded_quiz):
    stats = AnalyticsService.quiz_results(graded_quiz, graded_quiz.submissions.all())["question_analytics"]

    first, second = stats
    assert (first["question_id"], first["correct"], first["incorrect"], first["difficulty_level"]) == ("t1", 2, 1, "medium")
    assert (second["question_id"], second["correct"], second["incorrect"], second["difficulty_level"]) == ("t2", 1, 2, "hard")


def test_free_text_questions_have_no_difficulty(make_user, published_quiz):
    SubmissionService.submit(make_user("dan"), published_quiz, {"q3": "Paris"})

    stats = AnalyticsService.quiz_results(published_quiz, published_quiz.submissions.all())["question_analytics"]

    free_text = stats[2]
    assert free_text["answered"] == 1
    assert free_text["correct"] is None
    assert free_text["difficulty_level"] is None
    assert stats[0]["skipped"] == 1


def test_empty_results(quiz):
    results = AnalyticsService.quiz_results(quiz, [])

    assert results["average_score"] == 0
    assert results["question_analytics"][0]["difficulty_level"] is None


def test_results_endpoint_is_owner_only(client_for, teacher, student, graded_quiz):
    assert client_for(student).get(f"/api/quizzes/{graded_quiz.pk}/results/").status_code == 403

    res = client_for(teacher).get(f"/api/quizzes/{graded_quiz.pk}/results/")

    assert res.status_code == 200
    assert res.json()["analytics"]["total_submissions"] == 3
    assert len(res.json()["submissions"]) == 3
    assert res.json()["quiz"]["title"] == "Facts"
