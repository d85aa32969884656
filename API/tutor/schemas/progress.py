from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from tutor.schemas.insights import ProgressRow, QuizResultRow, SubjectRef


class StreakRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_streak: int = Field(0, alias="currentStreak", ge=0)
    longest_streak: int = Field(0, alias="longestStreak", ge=0)
    last_activity_date: date | None = Field(None, alias="lastActivityDate")
    topics_completed_today: int = Field(0, alias="topicsCompletedToday", ge=0)
    today: date | None = None


class StreakResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_streak: int = Field(..., alias="currentStreak")
    longest_streak: int = Field(..., alias="longestStreak")
    last_activity_date: date = Field(..., alias="lastActivityDate")
    topics_completed_today: int = Field(..., alias="topicsCompletedToday")
    continued: bool
    already_active_today: bool = Field(..., alias="alreadyActiveToday")


class ProgressSummaryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subjects: list[SubjectRef] = Field(default_factory=list)
    progress: list[ProgressRow] = Field(default_factory=list)
    test_results: list[QuizResultRow] = Field(default_factory=list, alias="testResults")


class ChapterProgress(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subject: str
    chapter: str
    completed_topics: int = Field(..., alias="completedTopics")
    total_topics: int = Field(..., alias="totalTopics")
    percent: int


class SubjectProgress(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subject: str
    completed_topics: int = Field(..., alias="completedTopics")


class ProgressSummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topics_completed: int = Field(..., alias="topicsCompleted")
    tests_taken: int = Field(..., alias="testsTaken")
    average_score: int = Field(..., alias="averageScore")
    strong_count: int = Field(..., alias="strongCount")
    average_count: int = Field(..., alias="averageCount")
    weak_count: int = Field(..., alias="weakCount")
    chapters: list[ChapterProgress]
    subjects: list[SubjectProgress]
