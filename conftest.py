import pytest
from django.contrib.auth.models import User
from rest_framework.test import APIClient

from auth_app.models import UserProfile
from quiz_app.api.serializers import QuizWriteSerializer
from quiz_app.api.services import QuizService


@pytest.fixture
def make_user(db):
    def make(username, role=UserProfile.Role.STUDENT, password="secret123"):
        user = User.objects.create_user(username=username, email=f"{username}@example.com", password=password)
        UserProfile.objects.create(user=user, role=role, display_name=username.title())
        return user
    return make


@pytest.fixture
def teacher(make_user):
    return make_user("teacher", UserProfile.Role.TEACHER)


@pytest.fixture
def other_teacher(make_user):
    return make_user("other_teacher", UserProfile.Role.TEACHER)


@pytest.fixture
def student(make_user):
    return make_user("student")


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    def make(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return make


@pytest.fixture
def quiz_payload():
    return {
        "title": "European Capitals",
        "description": "A short geography quiz.",
        "category": "Geography",
        "tags": ["europe", "capitals"],
        "questions": [
            {
                "id": "q1",
                "type": "multiple-choice",
                "text": "What is the capital of Italy?",
                "options": [{"text": "Milan"}, {"text": "Rome"}, {"text": "Naples"}, {"text": "Turin"}],
                "correct_answer": ["o2"],
                "points": 10,
            },
            {
                "id": "q2",
                "type": "true-false",
                "text": "Berlin is the capital of Germany.",
                "options": [{"text": "True"}, {"text": "False"}],
                "correct_answer": ["o1"],
                "points": 10,
            },
            {
                "id": "q3",
                "type": "short-answer",
                "text": "Name the capital of France.",
                "correct_answer": ["Paris"],
                "points": 10,
            },
        ],
    }


@pytest.fixture
def create_quiz():
    def create(user, payload, **overrides):
        serializer = QuizWriteSerializer(data=payload)
        serializer.is_valid(raise_exception=True)
        quiz = QuizService.create_quiz(user, serializer.validated_data)
        if overrides:
            for field, value in overrides.items():
                setattr(quiz, field, value)
            quiz.save()
        return QuizService.get_quiz(quiz.pk)
    return create


@pytest.fixture
def quiz(teacher, quiz_payload, create_quiz):
    return create_quiz(teacher, quiz_payload)


@pytest.fixture
def published_quiz(teacher, quiz_payload, create_quiz):
    return create_quiz(teacher, quiz_payload, is_published=True)


@pytest.fixture
def true_false_payload():
    return {
        "title": "Facts",
        "questions": [
            {
                "id": "t1",
                "type": "true-false",
                "text": "Water boils at 100 degrees Celsius at sea level.",
                "options": [{"text": "True"}, {"text": "False"}],
                "correct_answer": ["o1"],
            },
            {
                "id": "t2",
                "type": "true-false",
                "text": "The sun orbits the earth.",
                "options": [{"text": "True"}, {"text": "False"}],
                "correct_answer": ["o2"],
            },
        ],
    }


@pytest.fixture
def true_false_quiz(teacher, true_false_payload, create_quiz):
    return create_quiz(teacher, true_false_payload, is_published=True)
