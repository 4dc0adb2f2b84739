# models.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Intent(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def normalize(cls, value) -> Optional["Intent"]:
        """Case-insensitive lookup; None when the value is not a known intent."""
        text = str(value or "").strip().lower()
        for intent in cls:
            if intent.value.lower() == text:
                return intent
        return None


class Backend(str, Enum):
    OPENAI = "openai"
    GEMINI = "gemini"

    @classmethod
    def resolve(cls, choice: Optional[str]) -> "Backend":
        # Only an explicit "openai" selects OpenAI; everything else is Gemini.
        if choice and choice.strip().lower() == cls.OPENAI.value:
            return cls.OPENAI
        return cls.GEMINI


class OfferIn(BaseModel):
    name: str
    value_props: List[str]
    ideal_use_cases: List[str]

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @field_validator("value_props", "ideal_use_cases")
    @classmethod
    def _list_not_blank(cls, v: List[str]) -> List[str]:
        items = [item.strip() for item in v]
        if not items or not all(items):
            raise ValueError("must be a non-empty list of non-empty strings")
        return items


class Offer(OfferIn):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime


class Lead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    name: str = ""
    role: Optional[str] = None
    company: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    linkedin_bio: Optional[str] = None
    intent: Optional[Intent] = None
    score: Optional[int] = None
    reasoning: Optional[str] = None
    created_at: Optional[datetime] = None


class Classification(BaseModel):
    intent: Intent
    reasoning: str
    ai_points: int
    # True when the parser had to fall back instead of reading the response.
    defaulted: bool = False


class ScoreRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    llm_client: Optional[str] = Field(default=None, alias="llmClient")
