from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tutor.core.settings import settings

Performance = Literal["strong", "average", "weak"]


class QuizRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topic_name: str = Field(..., alias="topicName", min_length=1)
    grade: int = Field(..., ge=1, le=12)
    question_count: int = Field(default_factory=lambda: settings.default_question_count, alias="questionCount", ge=1, le=50)


class QuizQuestion(BaseModel):
    question: str
    options: list[str]
    correct: int
    explanation: str = ""


class GradeQuizRequest(BaseModel):
    questions: list[QuizQuestion] = Field(..., min_length=1)
    answers: list[int | None]

    @model_validator(mode="after")
    def _one_answer_per_question(self):
        if len(self.answers) != len(self.questions):
            raise ValueError("answers must have one entry per question")
        return self


class GradedAnswer(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str
    selected: int | None
    correct: int
    is_correct: bool = Field(..., alias="isCorrect")


class GradeQuizResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    score: int
    total_questions: int = Field(..., alias="totalQuestions")
    percentage: int
    performance: Performance
    answers: list[GradedAnswer]
