"""AI-assisted quiz authoring backed by Google Gemini.

Every entry point returns a ``GenerationResult`` instead of raising: either
``ok`` with the parsed data or ``fail`` with a user-facing error message.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from django.conf import settings
from google import genai
from google.genai import types

from .serializers import EnhancementSerializer, GeneratedQuizSerializer
from .utils import (
    PDF_EXTRACTION_PROMPT,
    build_document_quiz_prompt,
    build_enhance_prompt,
    build_quiz_prompt,
    build_summary_prompt,
    build_title_prompt,
    extract_json_object,
    normalize_generated_question,
    truncate_text,
)

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data):
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str):
        return cls(success=False, error=error)

    def as_dict(self) -> dict:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}


class ModelUnavailable(Exception):
    pass


def get_client():
    """Create a Gemini client from the configured API key."""
    if not settings.GEMINI_API_KEY:
        raise ModelUnavailable("GEMINI_API_KEY is not set.")
    return genai.Client(api_key=settings.GEMINI_API_KEY, http_options={"api_version": "v1"})


def generate_text(contents, client=None) -> str:
    """Send contents to the model and return the stripped text response."""
    client = client or get_client()
    result = client.models.generate_content(
        model=settings.GEMINI_MODEL,
        contents=contents,
    )
    return (getattr(result, "text", None) or "").strip()


def parse_json_response(raw: str, serializer_class) -> GenerationResult:
    """Parse a model response and validate it against a serializer shape."""
    if not raw:
        return GenerationResult.fail("Empty response from model.")

    payload = extract_json_object(raw)
    if payload is None:
        return GenerationResult.fail("The model response did not contain JSON.")

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        return GenerationResult.fail(f"The model returned invalid JSON: {e.msg}.")

    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        return GenerationResult.fail(f"The model response did not match the expected shape: {serializer.errors}")
    return GenerationResult.ok(serializer.validated_data)


def parse_generated_quiz(raw: str, limit: Optional[int] = None) -> GenerationResult:
    """Parse a generated quiz and normalize its questions to the stored shape.

    At most ``limit`` questions are kept when the model overshoots.
    """
    parsed = parse_json_response(raw, GeneratedQuizSerializer)
    if not parsed.success:
        return parsed

    quiz = parsed.data
    questions = []
    for q in quiz["questions"]:
        normalized = normalize_generated_question(q)
        if normalized is None:
            logger.warning("Dropping inconsistent generated question: %s", q.get("text", "")[:80])
            continue
        questions.append(normalized)

    if not questions:
        return GenerationResult.fail("The model did not produce any usable questions.")
    if limit:
        questions = questions[:limit]

    return GenerationResult.ok({
        "title": quiz["title"],
        "description": quiz.get("description", ""),
        "questions": questions,
    })


class QuizGenerationService:
    """Service class for AI generation and enhancement of quiz content."""

    @staticmethod
    def _call(context: str, contents, client=None):
        """Call the model, turning transport failures into a failed result."""
        try:
            return generate_text(contents, client=client), None
        except ModelUnavailable as e:
            logger.error("%s: %s", context, e)
            return None, GenerationResult.fail("AI generation is not configured.")
        except Exception:
            logger.exception("%s: model call failed", context)
            return None, GenerationResult.fail(f"An unexpected error occurred while {context}.")

    @staticmethod
    def generate_quiz(topic, question_types, number_of_questions, difficulty_level, additional_instructions="", client=None) -> GenerationResult:
        """Generate a complete quiz on a topic."""
        prompt = build_quiz_prompt(topic, question_types, number_of_questions, difficulty_level, additional_instructions)
        raw, failure = QuizGenerationService._call("generating the quiz", prompt, client)
        if failure:
            return failure
        return parse_generated_quiz(raw, limit=number_of_questions)

    @staticmethod
    def enhance_question(question_text: str, client=None) -> GenerationResult:
        """Suggest better wording and difficulty adjustments for a question."""
        raw, failure = QuizGenerationService._call("fetching suggestions", build_enhance_prompt(question_text), client)
        if failure:
            return failure
        return parse_json_response(raw, EnhancementSerializer)

    @staticmethod
    def process_pdf(data: bytes, filename: str, client=None) -> GenerationResult:
        """Extract text from a PDF and derive a title and summary from it."""
        if len(data) > settings.AI_MAX_PDF_BYTES:
            return GenerationResult.fail("The PDF document is larger than 10MB.")
        if not data:
            return GenerationResult.fail("The PDF document is empty.")

        contents = [
            PDF_EXTRACTION_PROMPT,
            types.Part.from_bytes(data=data, mime_type="application/pdf"),
        ]
        text, failure = QuizGenerationService._call(f"processing {filename}", contents, client)
        if failure:
            return failure
        if not text:
            return GenerationResult.fail("No text content found in the PDF document.")

        excerpt = truncate_text(text, settings.AI_MAX_EXCERPT_CHARS)

        title, failure = QuizGenerationService._call("generating the document title", build_title_prompt(excerpt), client)
        if failure:
            return failure
        summary, failure = QuizGenerationService._call("generating the document summary", build_summary_prompt(excerpt), client)
        if failure:
            return failure

        logger.info("Processed PDF %s (%d bytes, %d chars)", filename, len(data), len(text))
        return GenerationResult.ok({"text_content": excerpt, "title": title, "summary": summary})

    @staticmethod
    def generate_quiz_from_pdf(text_content, question_types, number_of_questions, difficulty_level, client=None) -> GenerationResult:
        """Generate a quiz from previously extracted document text."""
        excerpt = truncate_text(text_content, settings.AI_MAX_PROMPT_DOCUMENT_CHARS)
        prompt = build_document_quiz_prompt(excerpt, question_types, number_of_questions, difficulty_level)
        raw, failure = QuizGenerationService._call("generating the quiz from the document", prompt, client)
        if failure:
            return failure
        return parse_generated_quiz(raw, limit=number_of_questions)
