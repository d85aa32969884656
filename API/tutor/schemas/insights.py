from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MasteryStatus = Literal["mastered", "in-progress", "weak", "not-started"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TopicRef(_CamelModel):
    id: str
    name: str


class ChapterRef(_CamelModel):
    name: str
    topics: list[TopicRef] = Field(default_factory=list)


class SubjectRef(_CamelModel):
    name: str
    chapters: list[ChapterRef] = Field(default_factory=list)


class ProgressRow(_CamelModel):
    topic_id: str = Field(..., alias="topicId")
    topic_name: str | None = Field(None, alias="topicName")
    completed: bool = False


class QuizResultRow(_CamelModel):
    topic_id: str = Field(..., alias="topicId")
    topic_name: str | None = Field(None, alias="topicName")
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., alias="totalQuestions", ge=1)
    performance: Literal["strong", "average", "weak"]
    weak_areas: list[str] = Field(default_factory=list, alias="weakAreas")


class ProfileRow(_CamelModel):
    current_streak: int = Field(0, alias="currentStreak")
    longest_streak: int = Field(0, alias="longestStreak")


class InsightsRequest(_CamelModel):
    subjects: list[SubjectRef] = Field(default_factory=list)
    progress: list[ProgressRow] = Field(default_factory=list)
    test_results: list[QuizResultRow] = Field(default_factory=list, alias="testResults")
    profile: ProfileRow | None = None


class ChapterMastery(_CamelModel):
    subject: str
    chapter: str
    status: MasteryStatus
    mastered: int
    weak: int
    total: int
    topics: dict[str, MasteryStatus]


class MistakePattern(_CamelModel):
    type: str
    count: int
    description: str
    suggestion: str


class RiskAlert(_CamelModel):
    id: str
    severity: Literal["high", "medium", "low"]
    title: str
    description: str
    weak_topic: str = Field(..., alias="weakTopic")
    affected_topic: str = Field(..., alias="affectedTopic")
    suggested_action: str = Field(..., alias="suggestedAction")
    suggested_path: str = Field(..., alias="suggestedPath")


class LearningSnapshot(_CamelModel):
    health_score: int = Field(..., alias="healthScore")
    learning_style: str = Field(..., alias="learningStyle")
    learning_style_description: str = Field(..., alias="learningStyleDescription")
    strong_results: int = Field(..., alias="strongResults")
    current_streak: int = Field(..., alias="currentStreak")
    longest_streak: int = Field(..., alias="longestStreak")


class InsightsResponse(_CamelModel):
    mastery_map: list[ChapterMastery] = Field(..., alias="masteryMap")
    mistake_patterns: list[MistakePattern] = Field(..., alias="mistakePatterns")
    warnings: list[RiskAlert]
    snapshot: LearningSnapshot
