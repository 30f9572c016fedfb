"""Service layer for quiz authoring, submissions, results and dashboards."""

import logging

from django.db import transaction
from django.db.models import F, Q

from auth_app.models import get_profile
from core.errors import QuizAppError, fetch_or_empty
from quiz_app.attempt import QuizAttempt
from quiz_app.models import Quiz, Question, Submission
from quiz_app.scoring import compute_score, is_answer_correct, normalize_answer

logger = logging.getLogger(__name__)

PASSING_SCORE = 70
SCORE_BUCKETS = ["0-20%", "21-40%", "41-60%", "61-80%", "81-100%"]
QUIZ_FIELDS = [
    "title", "description", "time_limit", "is_public", "allow_retakes",
    "show_correct_answers", "randomize_questions", "category", "tags",
]


class QuizService:
    """Service class for handling quiz-related business logic."""

    @staticmethod
    def validate_quiz_data(data: dict):
        """Refuse quizzes without a title or without questions.

        Serializers already enforce this; the check is repeated here so no
        caller can reach the database with an incomplete quiz.
        """
        if not (data.get("title") or "").strip():
            raise QuizAppError("db/invalid-argument", "Quiz title cannot be empty.", {"title": ["Quiz title cannot be empty."]})
        if not data.get("questions"):
            raise QuizAppError("db/invalid-argument", "A quiz needs at least one question.", {"questions": ["A quiz needs at least one question."]})

    @staticmethod
    def create_quiz(user, data: dict) -> Quiz:
        """Save a new, unpublished quiz and its questions in a transaction.

        Args:
            user: The teacher authoring the quiz
            data: Validated quiz data with title, settings and questions

        Returns:
            Quiz: The created quiz instance with all questions

        Raises:
            QuizAppError: If the title is blank or there are no questions
        """
        QuizService.validate_quiz_data(data)

        with transaction.atomic():
            quiz = Quiz.objects.create(
                user=user,
                is_published=False,
                submission_count=0,
                **{f: data[f] for f in QUIZ_FIELDS if f in data},
            )
            QuizService._save_questions(quiz, data["questions"])

        logger.info("Quiz %s created by user %s with %d questions", quiz.pk, user.pk, len(data["questions"]))
        return quiz

    @staticmethod
    def update_quiz(quiz: Quiz, data: dict) -> Quiz:
        """Overwrite the provided fields of a quiz.

        A provided question list replaces the stored one; question ids sent
        by the client are kept so existing submissions stay meaningful.
        """
        if "title" in data and not (data["title"] or "").strip():
            raise QuizAppError("db/invalid-argument", "Quiz title cannot be empty.", {"title": ["Quiz title cannot be empty."]})
        if "questions" in data and not data["questions"]:
            raise QuizAppError("db/invalid-argument", "A quiz needs at least one question.", {"questions": ["A quiz needs at least one question."]})

        with transaction.atomic():
            for field in QUIZ_FIELDS:
                if field in data:
                    setattr(quiz, field, data[field])
            quiz.save()

            if "questions" in data:
                quiz.questions.all().delete()
                QuizService._save_questions(quiz, data["questions"])

        logger.info("Quiz %s updated", quiz.pk)
        return quiz

    @staticmethod
    def _save_questions(quiz: Quiz, questions):
        Question.objects.bulk_create([
            Question(
                quiz=quiz,
                position=position,
                type=q["type"],
                text=q["text"],
                options=list(q.get("options") or []),
                correct_answer=list(q["correct_answer"]),
                points=q.get("points", 10),
                **({"uid": q["uid"]} if q.get("uid") else {}),
            )
            for position, q in enumerate(questions)
        ])

    @staticmethod
    def delete_quiz(quiz: Quiz):
        """Hard delete a quiz. Its submissions are kept, detached from it."""
        quiz_id = quiz.pk
        quiz.delete()
        logger.info("Quiz %s deleted", quiz_id)

    @staticmethod
    def set_published(quiz: Quiz, is_published: bool) -> Quiz:
        quiz.is_published = is_published
        quiz.save(update_fields=["is_published", "updated_at"])
        return quiz

    @staticmethod
    def set_public(quiz: Quiz, is_public: bool) -> Quiz:
        quiz.is_public = is_public
        quiz.save(update_fields=["is_public", "updated_at"])
        return quiz

    @staticmethod
    def get_quiz(quiz_id) -> Quiz:
        quiz = Quiz.objects.select_related("user").prefetch_related("questions").filter(pk=quiz_id).first()
        if quiz is None:
            raise QuizAppError("db/not-found", "Quiz not found.")
        return quiz

    @staticmethod
    def get_owned_quiz(user, quiz_id) -> Quiz:
        """Fetch a quiz for writing; only its owner gets it."""
        quiz = QuizService.get_quiz(quiz_id)
        if quiz.user_id != user.id:
            logger.warning("User %s denied access to quiz %s", user.pk, quiz.pk)
            raise QuizAppError("db/permission-denied", "Access denied - Quiz does not belong to the user.")
        return quiz

    @staticmethod
    def get_takeable_quiz(user, quiz_id) -> Quiz:
        """Fetch a quiz for taking: published, or owned by the user."""
        quiz = QuizService.get_quiz(quiz_id)
        if not quiz.is_published and quiz.user_id != user.id:
            raise QuizAppError("db/not-found", "Quiz not found.")
        return quiz

    @staticmethod
    def _filtered(qs, search="", category="", published=None, ordering="-created_at"):
        if search:
            qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search))
        if category:
            qs = qs.filter(category__iexact=category)
        if published is not None:
            qs = qs.filter(is_published=published)
        return qs.order_by(ordering, "-id")

    @staticmethod
    def user_quizzes(user, search="", category="", published=None, ordering="-created_at"):
        qs = Quiz.objects.filter(user=user).prefetch_related("questions").select_related("user__profile")
        return QuizService._filtered(qs, search, category, published, ordering)

    @staticmethod
    def published_quizzes(search="", category=""):
        qs = Quiz.objects.filter(is_published=True).prefetch_related("questions").select_related("user__profile")
        return QuizService._filtered(qs, search, category)

    @staticmethod
    def public_quizzes():
        return Quiz.objects.filter(is_public=True, is_published=True).prefetch_related("questions").select_related("user__profile")

    @staticmethod
    def featured_quizzes(limit: int = 10):
        return QuizService.public_quizzes().order_by("-submission_count", "-created_at")[:limit]

    @staticmethod
    def can_view_answer_key(user, quiz: Quiz) -> bool:
        """Owners always see the key; others only after submitting, if the quiz allows it."""
        if quiz.user_id == user.id:
            return True
        if not quiz.show_correct_answers:
            return False
        return Submission.objects.filter(quiz=quiz, user=user).exists()


class SubmissionService:
    """Service class for quiz attempts and stored submissions."""

    @staticmethod
    def submit(user, quiz: Quiz, answers: dict, time_spent: int = 0) -> Submission:
        """Score and store an attempt.

        The reported answers and elapsed time are replayed through a
        ``QuizAttempt`` so an attempt that ran past the time limit is
        auto-submitted at the limit.
        """
        if not quiz.is_published and quiz.user_id != user.id:
            raise QuizAppError("db/not-found", "Quiz not found.")
        SubmissionService._ensure_can_submit(user, quiz)

        questions = list(quiz.questions.all())
        known = {q.uid for q in questions}

        def save(collected, elapsed, auto_submitted):
            return SubmissionService._save(user, quiz, questions, collected, elapsed, auto_submitted)

        attempt = QuizAttempt(quiz, on_submit=save)
        for question_uid, value in (answers or {}).items():
            if str(question_uid) in known:
                attempt.answer(question_uid, value)
        attempt.advance(time_spent)
        return attempt.submit()

    @staticmethod
    def _ensure_can_submit(user, quiz: Quiz):
        if not quiz.allow_retakes and Submission.objects.filter(quiz=quiz, user=user).exists():
            raise QuizAppError("db/already-exists", "You have already submitted this quiz.")

    @staticmethod
    def _save(user, quiz, questions, answers, time_spent, auto_submitted) -> Submission:
        result = compute_score(questions, answers)

        with transaction.atomic():
            # Concurrent submits for the same quiz serialize on the quiz row.
            if Quiz.objects.select_for_update().filter(pk=quiz.pk).first() is None:
                raise QuizAppError("db/not-found", "Quiz not found.")
            SubmissionService._ensure_can_submit(user, quiz)
            submission = Submission.objects.create(
                quiz=quiz,
                quiz_title=quiz.title,
                user=user,
                answers=answers,
                score=result.percentage,
                points_awarded=result.points_awarded,
                total_points=result.total_points,
                time_spent=time_spent,
                auto_submitted=auto_submitted,
            )
            Quiz.objects.filter(pk=quiz.pk).update(submission_count=F("submission_count") + 1)

        logger.info(
            "Submission %s for quiz %s by user %s: %s%% (%d ungraded)%s",
            submission.pk, quiz.pk, user.pk, result.percentage, len(result.ungraded),
            " [auto-submitted]" if auto_submitted else "",
        )
        return submission

    @staticmethod
    def user_submissions(user):
        return Submission.objects.filter(user=user).select_related("user__profile").order_by("-submitted_at", "-id")

    @staticmethod
    def quiz_submissions(quiz: Quiz):
        return Submission.objects.filter(quiz=quiz).select_related("user__profile").order_by("-submitted_at", "-id")


class AnalyticsService:
    """Aggregated results of a quiz."""

    @staticmethod
    def bucket(score: float) -> str:
        if score <= 20:
            return SCORE_BUCKETS[0]
        if score <= 40:
            return SCORE_BUCKETS[1]
        if score <= 60:
            return SCORE_BUCKETS[2]
        if score <= 80:
            return SCORE_BUCKETS[3]
        return SCORE_BUCKETS[4]

    @staticmethod
    def difficulty(correct: int, attempted: int):
        if attempted == 0:
            return None
        ratio = correct / attempted
        if ratio >= 0.7:
            return "easy"
        if ratio >= 0.4:
            return "medium"
        return "hard"

    @staticmethod
    def quiz_results(quiz: Quiz, submissions) -> dict:
        submissions = list(submissions)
        questions = list(quiz.questions.all())
        total = len(submissions)

        distribution = {name: 0 for name in SCORE_BUCKETS}
        for s in submissions:
            distribution[AnalyticsService.bucket(s.score)] += 1

        question_stats = []
        for question in questions:
            correct = incorrect = skipped = 0
            for s in submissions:
                answer = normalize_answer(s.answers.get(question.uid))
                if not any(a.strip() for a in answer):
                    skipped += 1
                    continue
                verdict = is_answer_correct(question, answer)
                if verdict:
                    correct += 1
                elif verdict is False:
                    incorrect += 1
            graded = question.is_choice
            question_stats.append({
                "question_id": question.uid,
                "text": question.text,
                "type": question.type,
                "points": question.points,
                "answered": total - skipped,
                "skipped": skipped,
                "correct": correct if graded else None,
                "incorrect": incorrect if graded else None,
                "difficulty_level": AnalyticsService.difficulty(correct, correct + incorrect) if graded else None,
            })

        return {
            "quiz_id": quiz.pk,
            "total_submissions": total,
            "total_points": sum(q.points for q in questions),
            "average_score": round(sum(s.score for s in submissions) / total, 2) if total else 0,
            "average_time_spent": round(sum(s.time_spent for s in submissions) / total, 2) if total else 0,
            "passed": sum(1 for s in submissions if s.score >= PASSING_SCORE),
            "score_distribution": [{"name": name, "count": count} for name, count in distribution.items()],
            "question_analytics": question_stats,
        }


class DashboardService:
    """Dashboard data. Each listing source degrades independently to an empty list."""

    @staticmethod
    def teacher_dashboard(user, filters: dict) -> dict:
        warnings = []
        quizzes = fetch_or_empty(lambda: QuizService.user_quizzes(user, **filters), "teacher quizzes", warnings)
        recent = fetch_or_empty(
            lambda: Submission.objects.filter(quiz__user=user).select_related("user__profile")[:10],
            "recent submissions",
            warnings,
        )
        return {
            "role": "teacher",
            "quizzes": quizzes,
            "recent_submissions": recent,
            "stats": {
                "total_quizzes": len(quizzes),
                "published_quizzes": sum(1 for q in quizzes if q.is_published),
                "total_submissions": sum(q.submission_count for q in quizzes),
            },
            "warnings": warnings,
        }

    @staticmethod
    def student_dashboard(user, filters: dict) -> dict:
        warnings = []
        available = fetch_or_empty(
            lambda: QuizService.published_quizzes(filters.get("search", ""), filters.get("category", "")),
            "available quizzes",
            warnings,
        )
        submissions = fetch_or_empty(lambda: SubmissionService.user_submissions(user), "your submissions", warnings)

        taken = {s.quiz_id for s in submissions}
        scores = [s.score for s in submissions]
        return {
            "role": "student",
            "available_quizzes": available,
            "submissions": submissions,
            "taken_quiz_ids": sorted(i for i in taken if i is not None),
            "categories": sorted({q.category for q in available if q.category}),
            "stats": {
                "quizzes_taken": len(submissions),
                "average_score": round(sum(scores) / len(scores)) if scores else 0,
                "passed": sum(1 for s in scores if s >= PASSING_SCORE),
            },
            "warnings": warnings,
        }

    @staticmethod
    def for_user(user, filters: dict) -> dict:
        if get_profile(user).is_teacher:
            return DashboardService.teacher_dashboard(user, filters)
        return DashboardService.student_dashboard(user, filters)
