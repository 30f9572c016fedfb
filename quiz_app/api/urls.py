"""URL configuration for quiz API endpoints."""

from django.urls import path
from .views import (
    AnswerKeyView,
    AvailableQuizListView,
    DashboardView,
    EnhanceQuestionView,
    FeaturedQuizListView,
    GenerateFromPdfView,
    GenerateQuizView,
    ProcessPdfView,
    PublicQuizListView,
    QuizDetailView,
    QuizListView,
    QuizPublishView,
    QuizResultsView,
    QuizVisibilityView,
    SubmissionHistoryView,
    SubmitQuizView,
    TakeQuizView,
)

urlpatterns = [
    path("quizzes/", QuizListView.as_view(), name="quizzes"),
    path("quizzes/available/", AvailableQuizListView.as_view(), name="available_quizzes"),
    path("quizzes/public/", PublicQuizListView.as_view(), name="public_quizzes"),
    path("quizzes/featured/", FeaturedQuizListView.as_view(), name="featured_quizzes"),
    path("quizzes/<int:id>/", QuizDetailView.as_view(), name="quiz_detail"),
    path("quizzes/<int:id>/publish/", QuizPublishView.as_view(), name="quiz_publish"),
    path("quizzes/<int:id>/visibility/", QuizVisibilityView.as_view(), name="quiz_visibility"),
    path("quizzes/<int:id>/take/", TakeQuizView.as_view(), name="quiz_take"),
    path("quizzes/<int:id>/submit/", SubmitQuizView.as_view(), name="quiz_submit"),
    path("quizzes/<int:id>/results/", QuizResultsView.as_view(), name="quiz_results"),
    path("quizzes/<int:id>/answers/", AnswerKeyView.as_view(), name="quiz_answers"),
    path("submissions/", SubmissionHistoryView.as_view(), name="submissions"),
    path("dashboard/", DashboardView.as_view(), name="dashboard"),
    path("ai/generate-quiz/", GenerateQuizView.as_view(), name="ai_generate_quiz"),
    path("ai/enhance-question/", EnhanceQuestionView.as_view(), name="ai_enhance_question"),
    path("ai/process-pdf/", ProcessPdfView.as_view(), name="ai_process_pdf"),
    path("ai/generate-from-pdf/", GenerateFromPdfView.as_view(), name="ai_generate_from_pdf"),
]
