"""Serializers for quiz API."""

from django.conf import settings
from rest_framework import serializers

from quiz_app.models import Quiz, Question, Submission, QuestionType, CHOICE_TYPES

DIFFICULTY_LEVELS = ["easy", "medium", "hard"]
MAX_TIME_LIMIT_MINUTES = 24 * 60
MAX_TIME_SPENT_SECONDS = 7 * 24 * 60 * 60


class OptionSerializer(serializers.Serializer):
    """A candidate answer of a choice question."""

    id = serializers.CharField(max_length=64, required=False)
    text = serializers.CharField()


class QuestionSerializer(serializers.ModelSerializer):
    """Serializer for quiz questions, enforcing the per-type invariants."""

    id = serializers.CharField(source="uid", max_length=64, required=False)
    options = OptionSerializer(many=True, required=False, default=list)
    correct_answer = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    points = serializers.IntegerField(min_value=0, default=10)

    class Meta:
        model = Question
        fields = ["id", "type", "text", "options", "correct_answer", "points"]

    def validate(self, attrs):
        qtype = attrs.get("type")
        options = [dict(o) for o in attrs.get("options") or []]

        if qtype in CHOICE_TYPES:
            self._assign_option_ids(options)
            ids = [o["id"] for o in options]
            if len(set(ids)) != len(ids):
                raise serializers.ValidationError({"options": "Option ids must be unique."})
            if qtype == QuestionType.TRUE_FALSE and len(options) != 2:
                raise serializers.ValidationError({"options": "A true/false question must have exactly 2 options."})
            if qtype == QuestionType.MULTIPLE_CHOICE and len(options) < 2:
                raise serializers.ValidationError({"options": "A multiple-choice question needs at least 2 options."})
            answers = attrs.get("correct_answer", [])
            if len(set(answers)) != len(answers):
                raise serializers.ValidationError({"correct_answer": "Correct answers must not repeat an option."})
            unknown = [a for a in answers if a not in ids]
            if unknown:
                raise serializers.ValidationError(
                    {"correct_answer": f"Correct answers must reference existing option ids: {', '.join(unknown)}."}
                )
            if qtype == QuestionType.TRUE_FALSE and len(answers) != 1:
                raise serializers.ValidationError({"correct_answer": "A true/false question has exactly one correct answer."})
        elif options:
            raise serializers.ValidationError({"options": "Free-text questions cannot have options."})

        attrs["options"] = options
        return attrs

    @staticmethod
    def _assign_option_ids(options):
        taken = {o["id"] for o in options if o.get("id")}
        n = 1
        for option in options:
            if option.get("id"):
                continue
            while f"o{n}" in taken:
                n += 1
            option["id"] = f"o{n}"
            taken.add(option["id"])


class QuizWriteSerializer(serializers.ModelSerializer):
    """Validates quiz payloads for create and whole-field overwrite updates."""

    questions = QuestionSerializer(many=True, allow_empty=False)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    time_limit = serializers.IntegerField(min_value=1, max_value=MAX_TIME_LIMIT_MINUTES, required=False, allow_null=True)

    class Meta:
        model = Quiz
        fields = [
            "title", "description", "time_limit", "is_public", "allow_retakes",
            "show_correct_answers", "randomize_questions", "category", "tags", "questions",
        ]
        extra_kwargs = {
            "title": {"allow_blank": False},
            "description": {"required": False, "allow_blank": True},
        }

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError("Quiz title cannot be empty.")
        return value.strip()

    def validate_tags(self, value):
        return [t.strip() for t in value if t.strip()]

    def validate_questions(self, value):
        uids = [q["uid"] for q in value if q.get("uid")]
        if len(set(uids)) != len(uids):
            raise serializers.ValidationError("Question ids must be unique within a quiz.")
        return value

    def validate(self, attrs):
        # A partial update still replaces the question list as a whole, so the
        # provided questions are validated as complete records.
        if self.partial and "questions" in self.initial_data:
            full = QuestionSerializer(data=self.initial_data["questions"], many=True, allow_empty=False)
            if not full.is_valid():
                raise serializers.ValidationError({"questions": full.errors})
            attrs["questions"] = self.validate_questions(full.validated_data)
        return attrs


class QuizSerializer(serializers.ModelSerializer):
    """Serializer for quizzes with nested questions, answers included."""

    questions = QuestionSerializer(many=True, read_only=True)
    author = serializers.IntegerField(source="user_id", read_only=True)
    total_points = serializers.SerializerMethodField()

    class Meta:
        model = Quiz
        fields = [
            "id", "title", "description", "time_limit", "is_published", "is_public",
            "allow_retakes", "show_correct_answers", "randomize_questions", "category",
            "tags", "submission_count", "total_points", "author", "created_at", "updated_at",
            "questions",
        ]

    def get_total_points(self, obj):
        return sum(q.points for q in obj.questions.all())


class QuizSummarySerializer(serializers.ModelSerializer):
    """Listing view of a quiz without its questions."""

    author = serializers.IntegerField(source="user_id", read_only=True)
    author_name = serializers.SerializerMethodField()
    question_count = serializers.SerializerMethodField()

    class Meta:
        model = Quiz
        fields = [
            "id", "title", "description", "time_limit", "is_published", "is_public",
            "category", "tags", "submission_count", "question_count", "author",
            "author_name", "created_at", "updated_at",
        ]

    def get_question_count(self, obj):
        return len(obj.questions.all())

    def get_author_name(self, obj):
        profile = getattr(obj.user, "profile", None)
        return (profile.display_name if profile else "") or obj.user.username


class TakeQuestionSerializer(serializers.ModelSerializer):
    """A question as shown to a quiz taker: no correct answers."""

    id = serializers.CharField(source="uid", read_only=True)

    class Meta:
        model = Question
        fields = ["id", "type", "text", "options", "points"]


class TakeQuizSerializer(serializers.ModelSerializer):
    """Quiz payload for taking a quiz."""

    questions = serializers.SerializerMethodField()
    time_limit_seconds = serializers.SerializerMethodField()

    class Meta:
        model = Quiz
        fields = ["id", "title", "description", "time_limit", "time_limit_seconds", "category", "questions"]

    def get_questions(self, obj):
        questions = self.context.get("questions")
        if questions is None:
            questions = obj.questions.all()
        return TakeQuestionSerializer(questions, many=True).data

    def get_time_limit_seconds(self, obj):
        return obj.time_limit * 60 if obj.time_limit else None


class QuizFilterSerializer(serializers.Serializer):
    """Query parameters accepted by quiz listings."""

    ORDERINGS = ["-created_at", "created_at", "title", "-title", "-submission_count", "submission_count", "-updated_at"]

    search = serializers.CharField(required=False, allow_blank=True, default="")
    category = serializers.CharField(required=False, allow_blank=True, default="")
    published = serializers.BooleanField(required=False, allow_null=True, default=None)
    ordering = serializers.ChoiceField(choices=ORDERINGS, required=False, default="-created_at")


class PublishSerializer(serializers.Serializer):
    is_published = serializers.BooleanField()


class VisibilitySerializer(serializers.Serializer):
    is_public = serializers.BooleanField()


class SubmitQuizSerializer(serializers.Serializer):
    """Answers of an attempt: question id to chosen option ids or text."""

    answers = serializers.DictField(child=serializers.JSONField(), default=dict)
    time_spent = serializers.IntegerField(min_value=0, max_value=MAX_TIME_SPENT_SECONDS, default=0)


class SubmissionSerializer(serializers.ModelSerializer):
    """Serializer for stored submissions."""

    quiz = serializers.IntegerField(source="quiz_id", read_only=True)
    user = serializers.IntegerField(source="user_id", read_only=True)
    user_name = serializers.SerializerMethodField()
    user_email = serializers.EmailField(source="user.email", read_only=True)

    class Meta:
        model = Submission
        fields = [
            "id", "quiz", "quiz_title", "user", "user_name", "user_email", "answers", "score",
            "points_awarded", "total_points", "time_spent", "auto_submitted", "submitted_at",
        ]
        read_only_fields = fields

    def get_user_name(self, obj):
        profile = getattr(obj.user, "profile", None)
        return (profile.display_name if profile else "") or obj.user.username


def question_types_field():
    return serializers.ListField(
        child=serializers.ChoiceField(choices=QuestionType.values),
        allow_empty=False,
        error_messages={
            "empty": "At least one question type must be selected.",
            "required": "At least one question type must be selected.",
        },
    )


def question_count_field():
    bounds = f"Number of questions must be between {settings.AI_MIN_QUESTIONS} and {settings.AI_MAX_QUESTIONS}."
    return serializers.IntegerField(
        min_value=settings.AI_MIN_QUESTIONS,
        max_value=settings.AI_MAX_QUESTIONS,
        error_messages={"min_value": bounds, "max_value": bounds, "required": bounds},
    )


class GenerateQuizRequestSerializer(serializers.Serializer):
    """Parameters of an AI quiz generation request."""

    topic = serializers.CharField(error_messages={"blank": "Topic cannot be empty.", "required": "Topic cannot be empty."})
    question_types = question_types_field()
    number_of_questions = question_count_field()
    difficulty_level = serializers.ChoiceField(choices=DIFFICULTY_LEVELS, default="medium")
    additional_instructions = serializers.CharField(required=False, allow_blank=True, default="")


class GenerateFromPdfRequestSerializer(serializers.Serializer):
    """Parameters of an AI quiz generation request from extracted document text."""

    text_content = serializers.CharField(
        error_messages={"blank": "Document text cannot be empty.", "required": "Document text cannot be empty."}
    )
    question_types = question_types_field()
    number_of_questions = question_count_field()
    difficulty_level = serializers.ChoiceField(choices=DIFFICULTY_LEVELS, default="medium")


class EnhanceQuestionRequestSerializer(serializers.Serializer):
    question_text = serializers.CharField(
        error_messages={"blank": "Question text cannot be empty.", "required": "Question text cannot be empty."}
    )


class GeneratedOptionSerializer(serializers.Serializer):
    text = serializers.CharField()


class GeneratedQuestionSerializer(serializers.Serializer):
    """Shape of one question as returned by the model."""

    text = serializers.CharField()
    type = serializers.ChoiceField(choices=QuestionType.values)
    options = GeneratedOptionSerializer(many=True, required=False, default=list)
    correct_answer = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    points = serializers.IntegerField(min_value=0, default=10)


class GeneratedQuizSerializer(serializers.Serializer):
    """Shape of a generated quiz as returned by the model."""

    title = serializers.CharField()
    description = serializers.CharField(allow_blank=True, default="")
    questions = GeneratedQuestionSerializer(many=True, allow_empty=False)


class EnhancementSerializer(serializers.Serializer):
    """Shape of a question enhancement as returned by the model."""

    enhanced_wording = serializers.CharField()
    difficulty_suggestion = serializers.CharField()
