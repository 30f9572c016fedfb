from django.contrib import admin
from .models import Quiz, Question, Submission


class QuestionInline(admin.TabularInline):
    """Inline admin for questions within a quiz."""

    model = Question
    extra = 0
    fields = ['position', 'uid', 'type', 'text', 'options', 'correct_answer', 'points']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    """Admin interface for Quiz model."""

    list_display = ['id', 'title', 'user', 'is_published', 'is_public', 'submission_count', 'created_at']
    list_filter = ['is_published', 'is_public', 'category', 'created_at']
    search_fields = ['title', 'description', 'category', 'user__username']
    readonly_fields = ['submission_count', 'created_at', 'updated_at']
    inlines = [QuestionInline]

    fieldsets = (
        ('Quiz Information', {
            'fields': ('user', 'title', 'description', 'category', 'tags')
        }),
        ('Settings', {
            'fields': (
                'time_limit', 'is_published', 'is_public', 'allow_retakes',
                'show_correct_answers', 'randomize_questions', 'submission_count',
            )
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    """Admin interface for Question model."""

    list_display = ['id', 'quiz_link', 'type', 'text_short', 'points', 'created_at']
    list_filter = ['type', 'created_at']
    search_fields = ['text', 'quiz__title']
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        ('Question Details', {
            'fields': ('quiz', 'uid', 'position', 'type', 'text', 'options', 'correct_answer', 'points')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def quiz_link(self, obj):
        """Display quiz title with ID as link."""
        from django.urls import reverse
        from django.utils.html import format_html
        url = reverse('admin:quiz_app_quiz_change', args=[obj.quiz.id])
        return format_html('<a href="{}">{} ({})</a>', url, obj.quiz.title, obj.quiz.id)

    quiz_link.short_description = 'Quiz'
    quiz_link.admin_order_field = 'quiz'

    def text_short(self, obj):
        """Display shortened question text."""
        return obj.text[:50] + '...' if len(obj.text) > 50 else obj.text

    text_short.short_description = 'Question'


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    """Read-only admin for submissions; they are never edited after creation."""

    list_display = ['id', 'quiz_title', 'user', 'score', 'auto_submitted', 'submitted_at']
    list_filter = ['auto_submitted', 'submitted_at']
    search_fields = ['quiz_title', 'user__username', 'user__email']
    readonly_fields = [
        'quiz', 'quiz_title', 'user', 'answers', 'score', 'points_awarded',
        'total_points', 'time_spent', 'auto_submitted', 'submitted_at',
    ]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
