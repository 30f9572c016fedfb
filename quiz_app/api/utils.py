"""Utility functions for AI quiz generation: prompts, response cleanup and normalization."""

import re

from quiz_app.models import QuestionType, CHOICE_TYPES

QUESTION_SHAPE = """{
  "title": "Quiz Title",
  "description": "Quiz Description",
  "questions": [
    {
      "text": "Question text",
      "type": "multiple-choice",
      "options": [
        {"text": "Option A"},
        {"text": "Option B"},
        {"text": "Option C"},
        {"text": "Option D"}
      ],
      "correct_answer": ["0"],
      "points": 10
    }
  ]
}"""

QUESTION_GUIDELINES = """- Distribute question types as evenly as possible based on the requested types.
- For multiple-choice questions: provide 4 options, use correct_answer as an array of option indices (e.g. ["0"] for the first option, ["0","2"] for multiple correct).
- For true-false questions: provide exactly 2 options ["True", "False"], use correct_answer ["0"] for True or ["1"] for False.
- For short-answer and fill-in-the-blank: leave options empty, use correct_answer as an array with the correct text answer.
- Assign appropriate points (typically 10 points per question, but can vary based on difficulty).
- Ensure questions are appropriate for the specified difficulty level.
- Make questions clear, engaging, and educational."""


def strip_json_fences(text: str):
    """Remove markdown code fences from JSON response.

    Strips triple backticks and language identifiers from AI responses.
    """
    t = text.strip()
    if t.startswith("```"):
        t = re.sub(r"^```[a-zA-Z]*\s*", "", t)
        t = re.sub(r"\s*```$", "", t)
        t = t.strip()
    return t


def extract_json_object(text: str):
    """Slice the outermost JSON object out of a model response.

    Returns ``None`` when the response holds no object at all.
    """
    t = strip_json_fences(text)
    start = t.find("{")
    end = t.rfind("}")
    if start == -1 or end < start:
        return None
    return t[start:end + 1]


def truncate_text(text: str, limit: int, suffix: str = "..."):
    """Cut text to at most ``limit`` characters, marking the cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + suffix


def build_quiz_prompt(topic: str, question_types, number_of_questions: int, difficulty_level: str, additional_instructions: str = ""):
    """Build the prompt asking the model for a complete quiz on a topic."""
    extra = f"- Additional Instructions: {additional_instructions}\n" if additional_instructions else ""
    return f"""You are an AI assistant designed to help teachers create comprehensive quizzes.

Generate a complete quiz based on the following parameters:
- Topic: {topic}
- Question Types: {", ".join(question_types)}
- Number of Questions: {number_of_questions}
- Difficulty Level: {difficulty_level}
{extra}
Requirements:
- Create a relevant title and description for the quiz.
- Generate exactly {number_of_questions} questions.
{QUESTION_GUIDELINES}

Return ONLY valid JSON in this exact format, no additional text:
{QUESTION_SHAPE}
"""


def build_document_quiz_prompt(document_excerpt: str, question_types, number_of_questions: int, difficulty_level: str):
    """Build the prompt asking the model for a quiz based on document content."""
    return f"""You are an AI assistant designed to help teachers create comprehensive quizzes from educational content.

Generate a complete quiz based on the following document content:
{document_excerpt}

Quiz Parameters:
- Question Types: {", ".join(question_types)}
- Number of Questions: {number_of_questions}
- Difficulty Level: {difficulty_level}

Requirements:
- Create a relevant title and description for the quiz based on the document content.
- Generate exactly {number_of_questions} questions.
- Focus on key concepts and important information from the document.
{QUESTION_GUIDELINES}

Return ONLY valid JSON in this exact format, no additional text:
{QUESTION_SHAPE}
"""


def build_enhance_prompt(question_text: str):
    """Build the prompt asking for a better wording and difficulty advice."""
    return f"""You are an AI assistant designed to help teachers improve their quiz questions.

Given the following quiz question, provide suggestions for enhanced wording and difficulty adjustment.

Question: {question_text}

Consider clarity, engagement, and appropriate difficulty level for students.

Return ONLY valid JSON in this exact format, no additional text:
{{
  "enhanced_wording": "Improved version of the question text",
  "difficulty_suggestion": "Suggestions for adjusting the difficulty level"
}}
"""


PDF_EXTRACTION_PROMPT = (
    "Extract the text content from the following PDF document. Focus on the main content "
    "and ignore headers, footers, and page numbers. Provide only the text content, nothing else."
)


def build_title_prompt(excerpt: str):
    return f"""Based on the following document content, generate a concise and relevant title (max 10 words):

{excerpt}

Return ONLY the title, no additional text."""


def build_summary_prompt(excerpt: str):
    return f"""Provide a concise summary (2-3 sentences) of the following document content:

{excerpt}

Return ONLY the summary, no additional text."""


def normalize_generated_question(question: dict):
    """Turn a validated generated question into the stored question shape.

    Options get ids ``o1..oN`` and index answers are mapped onto those ids.
    Free-text questions drop any options the model produced. Returns
    ``None`` when the question cannot be made consistent.
    """
    qtype = question["type"]
    points = question.get("points", 10)

    if qtype not in CHOICE_TYPES:
        answers = [a.strip() for a in question["correct_answer"] if a.strip()]
        if not answers:
            return None
        return {"type": qtype, "text": question["text"], "options": [], "correct_answer": answers, "points": points}

    options = [{"id": f"o{i}", "text": o["text"]} for i, o in enumerate(question.get("options") or [], start=1)]
    if qtype == QuestionType.TRUE_FALSE and not options:
        options = [{"id": "o1", "text": "True"}, {"id": "o2", "text": "False"}]

    correct = []
    for answer in question["correct_answer"]:
        option_id = _answer_to_option_id(answer, options)
        if option_id is None:
            return None
        if option_id not in correct:
            correct.append(option_id)

    if qtype == QuestionType.TRUE_FALSE and (len(options) != 2 or len(correct) != 1):
        return None
    if qtype == QuestionType.MULTIPLE_CHOICE and len(options) < 2:
        return None
    if not correct:
        return None

    return {"type": qtype, "text": question["text"], "options": options, "correct_answer": correct, "points": points}


def _answer_to_option_id(answer: str, options):
    """Resolve an index (``"0"``), a letter (``"A"``) or an option text to an option id."""
    a = answer.strip()
    if a.isdecimal():
        index = int(a)
        return options[index]["id"] if index < len(options) else None
    if len(a) == 1 and a.isalpha():
        index = ord(a.upper()) - ord("A")
        if index < len(options):
            return options[index]["id"]
    for option in options:
        if option["text"].strip().lower() == a.lower():
            return option["id"]
    return None
