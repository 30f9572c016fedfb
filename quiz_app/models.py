"""Models for quiz application."""

import uuid

from django.db import models
from django.contrib.auth.models import User


class QuestionType(models.TextChoices):
    MULTIPLE_CHOICE = "multiple-choice", "Multiple choice"
    TRUE_FALSE = "true-false", "True / false"
    SHORT_ANSWER = "short-answer", "Short answer"
    FILL_IN_THE_BLANK = "fill-in-the-blank", "Fill in the blank"


CHOICE_TYPES = (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE)
FREE_TEXT_TYPES = (QuestionType.SHORT_ANSWER, QuestionType.FILL_IN_THE_BLANK)


def new_uid():
    return uuid.uuid4().hex[:12]


class Quiz(models.Model):
    """Model representing a quiz authored by a teacher."""

    user = models.ForeignKey(User, related_name="quizzes", on_delete=models.CASCADE)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    time_limit = models.PositiveIntegerField(null=True, blank=True, help_text="Time limit in minutes")
    is_published = models.BooleanField(default=False)
    is_public = models.BooleanField(default=False)
    allow_retakes = models.BooleanField(default=False)
    show_correct_answers = models.BooleanField(default=False)
    randomize_questions = models.BooleanField(default=False)
    category = models.CharField(max_length=100, blank=True)
    tags = models.JSONField(default=list, blank=True)
    submission_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Quiz"
        verbose_name_plural = "Quizzes"
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def total_points(self):
        return sum(q.points for q in self.questions.all())


class Question(models.Model):
    """Model representing a single scored prompt of a fixed type."""

    quiz = models.ForeignKey(Quiz, related_name="questions", on_delete=models.CASCADE)
    uid = models.CharField(max_length=64, default=new_uid)
    position = models.PositiveIntegerField(default=0)
    type = models.CharField(max_length=32, choices=QuestionType.choices)
    text = models.TextField()
    options = models.JSONField(default=list, blank=True)
    correct_answer = models.JSONField(default=list)
    points = models.PositiveIntegerField(default=10)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Question"
        verbose_name_plural = "Questions"
        ordering = ['position', 'id']
        constraints = [
            models.UniqueConstraint(fields=['quiz', 'uid'], name='unique_question_uid_per_quiz'),
        ]

    def __str__(self):
        return f"{self.text[:50]}..." if len(self.text) > 50 else self.text

    @property
    def is_choice(self):
        return self.type in CHOICE_TYPES


class Submission(models.Model):
    """One student's completed attempt at a quiz. Never updated after creation."""

    quiz = models.ForeignKey(Quiz, related_name="submissions", null=True, blank=True, on_delete=models.SET_NULL)
    quiz_title = models.CharField(max_length=255, blank=True)
    user = models.ForeignKey(User, related_name="submissions", on_delete=models.CASCADE)
    answers = models.JSONField(default=dict, blank=True)
    score = models.FloatField(default=0)
    points_awarded = models.PositiveIntegerField(default=0)
    total_points = models.PositiveIntegerField(default=0)
    time_spent = models.PositiveIntegerField(default=0, help_text="Seconds")
    auto_submitted = models.BooleanField(default=False)
    submitted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Submission"
        verbose_name_plural = "Submissions"
        ordering = ['-submitted_at', '-id']

    def __str__(self):
        return f"{self.user.username} - {self.quiz_title} - {self.score}%"
