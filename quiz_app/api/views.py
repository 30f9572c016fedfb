"""API views for quiz authoring, taking, results, dashboards and AI-assisted generation."""

import random

from django.conf import settings
from rest_framework import status, views, permissions, response

from auth_app.permissions import IsTeacher
from core.errors import QuizAppError
from .ai_services import QuizGenerationService
from .serializers import (
    EnhanceQuestionRequestSerializer,
    GenerateFromPdfRequestSerializer,
    GenerateQuizRequestSerializer,
    PublishSerializer,
    QuizFilterSerializer,
    QuizSerializer,
    QuizSummarySerializer,
    QuizWriteSerializer,
    SubmissionSerializer,
    SubmitQuizSerializer,
    TakeQuizSerializer,
    VisibilitySerializer,
)
from .services import AnalyticsService, DashboardService, QuizService, SubmissionService


class QuizListView(views.APIView):
    """List the authenticated teacher's quizzes or create a new one."""

    def get_permissions(self):
        if self.request.method == "POST":
            return [permissions.IsAuthenticated(), IsTeacher()]
        return [permissions.IsAuthenticated()]

    def get(self, request):
        """Retrieve all quizzes owned by the authenticated user, filtered and sorted."""
        filters = QuizFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        quizzes = QuizService.user_quizzes(request.user, **filters.validated_data)
        return response.Response(QuizSummarySerializer(quizzes, many=True).data, status=status.HTTP_200_OK)

    def post(self, request):
        """Create a quiz with its questions. New quizzes start unpublished."""
        serializer = QuizWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quiz = QuizService.create_quiz(request.user, serializer.validated_data)
        return response.Response(QuizSerializer(QuizService.get_quiz(quiz.pk)).data, status=status.HTTP_201_CREATED)


class QuizDetailView(views.APIView):
    """Handle retrieval, updating, and deletion of individual quizzes by their owner."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, id):
        """Retrieve a quiz with all questions and answers for editing.

        Returns 403 if quiz doesn't belong to authenticated user.
        """
        quiz = QuizService.get_owned_quiz(request.user, id)
        return response.Response(QuizSerializer(quiz).data, status=status.HTTP_200_OK)

    def put(self, request, id):
        """Overwrite the whole quiz."""
        return self._update(request, id, partial=False)

    def patch(self, request, id):
        """Overwrite the provided quiz fields; a question list replaces the stored one."""
        return self._update(request, id, partial=True)

    def _update(self, request, id, partial):
        quiz = QuizService.get_owned_quiz(request.user, id)
        serializer = QuizWriteSerializer(quiz, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        QuizService.update_quiz(quiz, serializer.validated_data)
        return response.Response(QuizSerializer(QuizService.get_quiz(quiz.pk)).data, status=status.HTTP_200_OK)

    def delete(self, request, id):
        """Delete a quiz and its questions; submissions are kept.

        Returns 403 if quiz doesn't belong to authenticated user.
        """
        quiz = QuizService.get_owned_quiz(request.user, id)
        QuizService.delete_quiz(quiz)
        return response.Response(status=status.HTTP_204_NO_CONTENT)


class QuizPublishView(views.APIView):
    """Publish or unpublish a quiz."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, id):
        quiz = QuizService.get_owned_quiz(request.user, id)
        serializer = PublishSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        QuizService.set_published(quiz, serializer.validated_data["is_published"])
        return response.Response(QuizSerializer(quiz).data, status=status.HTTP_200_OK)


class QuizVisibilityView(views.APIView):
    """Make a quiz public or private."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, id):
        quiz = QuizService.get_owned_quiz(request.user, id)
        serializer = VisibilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        QuizService.set_public(quiz, serializer.validated_data["is_public"])
        return response.Response(QuizSerializer(quiz).data, status=status.HTTP_200_OK)


class AvailableQuizListView(views.APIView):
    """All published quizzes from every teacher."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        filters = QuizFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        data = filters.validated_data
        quizzes = QuizService.published_quizzes(data["search"], data["category"])
        return response.Response(QuizSummarySerializer(quizzes, many=True).data, status=status.HTTP_200_OK)


class PublicQuizListView(views.APIView):
    """Quizzes that are both published and public."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        quizzes = QuizService.public_quizzes().order_by("-created_at", "-id")
        return response.Response(QuizSummarySerializer(quizzes, many=True).data, status=status.HTTP_200_OK)


class FeaturedQuizListView(views.APIView):
    """Most taken public quizzes."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        try:
            limit = max(1, min(int(request.query_params.get("limit", 10)), 50))
        except ValueError:
            raise QuizAppError("db/invalid-argument", detail={"limit": ["A valid integer is required."]})
        quizzes = QuizService.featured_quizzes(limit)
        return response.Response(QuizSummarySerializer(quizzes, many=True).data, status=status.HTTP_200_OK)


class TakeQuizView(views.APIView):
    """Quiz content for taking it, without correct answers."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, id):
        quiz = QuizService.get_takeable_quiz(request.user, id)
        questions = list(quiz.questions.all())
        if quiz.randomize_questions:
            random.shuffle(questions)
        data = TakeQuizSerializer(quiz, context={"questions": questions}).data
        return response.Response(data, status=status.HTTP_200_OK)


class SubmitQuizView(views.APIView):
    """Submit an attempt; the score is computed server-side."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, id):
        quiz = QuizService.get_takeable_quiz(request.user, id)
        serializer = SubmitQuizSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        submission = SubmissionService.submit(
            request.user,
            quiz,
            serializer.validated_data["answers"],
            serializer.validated_data["time_spent"],
        )
        return response.Response(SubmissionSerializer(submission).data, status=status.HTTP_201_CREATED)


class QuizResultsView(views.APIView):
    """Aggregated results and all submissions of a quiz, for its owner."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, id):
        quiz = QuizService.get_owned_quiz(request.user, id)
        submissions = list(SubmissionService.quiz_submissions(quiz))
        data = {
            "quiz": QuizSummarySerializer(quiz).data,
            "analytics": AnalyticsService.quiz_results(quiz, submissions),
            "submissions": SubmissionSerializer(submissions, many=True).data,
        }
        return response.Response(data, status=status.HTTP_200_OK)


class AnswerKeyView(views.APIView):
    """The quiz with its correct answers."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, id):
        quiz = QuizService.get_quiz(id)
        if not QuizService.can_view_answer_key(request.user, quiz):
            raise QuizAppError("db/permission-denied", "The answer key of this quiz is not available to you.")
        return response.Response(QuizSerializer(quiz).data, status=status.HTTP_200_OK)


class SubmissionHistoryView(views.APIView):
    """The authenticated user's submissions, newest first."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        submissions = SubmissionService.user_submissions(request.user)
        return response.Response(SubmissionSerializer(submissions, many=True).data, status=status.HTTP_200_OK)


class DashboardView(views.APIView):
    """Teacher or student dashboard, depending on the user's role."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        filters = QuizFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        dashboard = DashboardService.for_user(request.user, filters.validated_data)

        if dashboard["role"] == "teacher":
            dashboard["quizzes"] = QuizSummarySerializer(dashboard["quizzes"], many=True).data
            dashboard["recent_submissions"] = SubmissionSerializer(dashboard["recent_submissions"], many=True).data
        else:
            dashboard["available_quizzes"] = QuizSummarySerializer(dashboard["available_quizzes"], many=True).data
            dashboard["submissions"] = SubmissionSerializer(dashboard["submissions"], many=True).data
        return response.Response(dashboard, status=status.HTTP_200_OK)


def first_error(errors) -> str:
    """Pick the first human-readable message out of serializer errors."""
    if isinstance(errors, dict):
        for value in errors.values():
            return first_error(value)
    if isinstance(errors, list) and errors:
        return first_error(errors[0])
    return str(errors)


class AIActionView(views.APIView):
    """Base for AI actions answering ``{"success", "data" | "error"}``."""

    permission_classes = [permissions.IsAuthenticated, IsTeacher]
    request_serializer_class = None

    def post(self, request):
        serializer = self.request_serializer_class(data=request.data)
        if not serializer.is_valid():
            return response.Response({"success": False, "error": first_error(serializer.errors)}, status=status.HTTP_400_BAD_REQUEST)

        result = self.run(serializer.validated_data)
        code = status.HTTP_200_OK if result.success else status.HTTP_502_BAD_GATEWAY
        return response.Response(result.as_dict(), status=code)

    def run(self, data):
        raise NotImplementedError


class GenerateQuizView(AIActionView):
    """Generate a complete quiz on a topic."""

    request_serializer_class = GenerateQuizRequestSerializer

    def run(self, data):
        return QuizGenerationService.generate_quiz(
            data["topic"],
            data["question_types"],
            data["number_of_questions"],
            data["difficulty_level"],
            data["additional_instructions"],
        )


class EnhanceQuestionView(AIActionView):
    """Suggest better wording and difficulty for a question."""

    request_serializer_class = EnhanceQuestionRequestSerializer

    def run(self, data):
        return QuizGenerationService.enhance_question(data["question_text"])


class GenerateFromPdfView(AIActionView):
    """Generate a quiz from text extracted out of a document."""

    request_serializer_class = GenerateFromPdfRequestSerializer

    def run(self, data):
        return QuizGenerationService.generate_quiz_from_pdf(
            data["text_content"],
            data["question_types"],
            data["number_of_questions"],
            data["difficulty_level"],
        )


class ProcessPdfView(views.APIView):
    """Extract text, a title and a summary from an uploaded PDF."""

    permission_classes = [permissions.IsAuthenticated, IsTeacher]

    def post(self, request):
        upload = request.FILES.get("file")
        if upload is None:
            return response.Response({"success": False, "error": "Please upload a PDF file."}, status=status.HTTP_400_BAD_REQUEST)
        if not upload.name.lower().endswith(".pdf") and upload.content_type != "application/pdf":
            return response.Response({"success": False, "error": "Only PDF documents are supported."}, status=status.HTTP_400_BAD_REQUEST)

        if upload.size > settings.AI_MAX_PDF_BYTES:
            return response.Response({"success": False, "error": "The PDF document is larger than 10MB."}, status=status.HTTP_400_BAD_REQUEST)
        if upload.size == 0:
            return response.Response({"success": False, "error": "The PDF document is empty."}, status=status.HTTP_400_BAD_REQUEST)

        result = QuizGenerationService.process_pdf(upload.read(), upload.name)
        code = status.HTTP_200_OK if result.success else status.HTTP_502_BAD_GATEWAY
        return response.Response(result.as_dict(), status=code)
