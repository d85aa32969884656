"""
Quiz Generation Agent — asks the AI gateway for multiple-choice questions.

The model is forced to call the ``generate_quiz`` tool, so the answer arrives
as JSON tool-call arguments instead of prose. Those arguments are returned as
they are: no bounds check on ``correct`` and no count check.
"""
import json

from tutor.agents.base import BaseAgent
from tutor.core.errors import UpstreamFailureError
from tutor.core.gateway import AIGatewayClient
from tutor.core.logging import DOMAIN_QUIZ, get_domain_logger

logger = get_domain_logger(__name__, DOMAIN_QUIZ)

QUIZ_TOOL_NAME = "generate_quiz"

QUIZ_TOOL = {
    "type": "function",
    "function": {
        "name": QUIZ_TOOL_NAME,
        "description": "Generate quiz questions",
        "parameters": {
            "type": "object",
            "properties": {
                "questions": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "question": {"type": "string"},
                            "options": {"type": "array", "items": {"type": "string"}},
                            "correct": {"type": "number", "description": "Index of correct answer (0-3)"},
                            "explanation": {"type": "string"},
                        },
                        "required": ["question", "options", "correct", "explanation"],
                    },
                }
            },
            "required": ["questions"],
        },
    },
}


def build_quiz_messages(topic_name: str, grade: int, question_count: int) -> list[dict]:
    return [
        {
            "role": "system",
            "content": (
                f"You are an NCERT quiz generator for Grade {grade} students. "
                f'Generate exactly {question_count} multiple choice questions about "{topic_name}". '
                f"Questions should be appropriate for Grade {grade} level and follow NCERT curriculum."
            ),
        },
        {
            "role": "user",
            "content": f'Generate {question_count} quiz questions about "{topic_name}" for Grade {grade}.',
        },
    ]


def extract_tool_arguments(completion: dict):
    """Return the parsed arguments of the first tool call; any gap is fatal."""
    try:
        tool_call = completion["choices"][0]["message"]["tool_calls"][0]
        arguments = tool_call["function"]["arguments"]
    except (KeyError, IndexError, TypeError):
        raise UpstreamFailureError("Failed to generate quiz") from None

    if isinstance(arguments, dict):
        return arguments
    if not isinstance(arguments, str):
        raise UpstreamFailureError("Failed to generate quiz")
    try:
        return json.loads(arguments)
    except ValueError as exc:
        raise UpstreamFailureError(f"Invalid quiz payload from AI gateway: {exc}") from exc


class QuizGenerationAgent(BaseAgent):
    def __init__(self, gateway: AIGatewayClient):
        self.gateway = gateway

    async def run(self, input_data: dict) -> dict:
        topic_name = input_data["topic_name"]
        grade = input_data["grade"]
        question_count = input_data["question_count"]

        completion = await self.gateway.complete(
            {
                "messages": build_quiz_messages(topic_name, grade, question_count),
                "tools": [QUIZ_TOOL],
                "tool_choice": {"type": "function", "function": {"name": QUIZ_TOOL_NAME}},
            }
        )
        quiz = extract_tool_arguments(completion)
        questions = quiz.get("questions") if isinstance(quiz, dict) else None
        returned = len(questions) if isinstance(questions, list) else None
        logger.info(
            "Quiz generated | topic=%s grade=%s requested=%s returned=%s",
            topic_name,
            grade,
            question_count,
            returned,
        )
        return quiz
