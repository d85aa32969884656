from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ChatMode(str, Enum):
    TEACHER = "teacher"
    STUDENT = "student"


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatContext(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topic_name: str = Field(..., alias="topicName")
    chapter_name: str = Field(..., alias="chapterName")
    subject_name: str = Field(..., alias="subjectName")
    grade: int = Field(..., ge=1, le=12)


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(..., min_length=1, description="Oldest first; last entry is the new user turn")
    mode: ChatMode
    context: ChatContext

    @model_validator(mode="after")
    def _last_turn_is_user(self):
        if self.messages[-1].role != "user":
            raise ValueError("last message must be the newest user turn")
        return self
