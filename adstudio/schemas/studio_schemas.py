from pydantic import BaseModel, Field, constr, field_validator
from typing import Optional, List

from adstudio.services.duration import TARGET_DURATIONS, Verdict


NonEmptyText = constr(strip_whitespace=True, min_length=1)


def _check_target(value: int) -> int:
    if value not in TARGET_DURATIONS:
        allowed = ", ".join(str(d) for d in TARGET_DURATIONS)
        raise ValueError(f"duration must be one of {allowed} seconds")
    return value


# ==================== REQUEST SCHEMAS ====================


class ScriptRequest(BaseModel):
    """Brand brief sent to the language model"""
    brand_name: NonEmptyText = Field(..., alias="brandName", description="Brand to advertise")
    description: NonEmptyText = Field(..., description="What the ad should promote")
    duration: int = Field(..., description="Target ad length in seconds")

    check_duration = field_validator("duration")(_check_target)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "brandName": "Acme",
                "description": "fast shipping on every order",
                "duration": 30
            }
        }


class ShortenRequest(BaseModel):
    """Over-long script to rewrite for its ad slot"""
    script: NonEmptyText
    duration: int
    brand_name: str = Field("", alias="brandName")

    check_duration = field_validator("duration")(_check_target)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "script": "Acme ships fast. Really fast. ...",
                "duration": 15,
                "brandName": "Acme"
            }
        }


class DurationCheckRequest(BaseModel):
    script: NonEmptyText
    duration: Optional[int] = None

    @field_validator("duration")
    @classmethod
    def _optional_target(cls, value):
        return value if value is None else _check_target(value)


class AudioRequest(BaseModel):
    """Script plus the voice to read it"""
    script: NonEmptyText
    voice_id: NonEmptyText = Field(..., alias="voiceId")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "script": "Hello! This is a sample of my voice. How do I sound?",
                "voiceId": "21m00Tcm4TlvDq8ikWAM"
            }
        }


# ==================== RESPONSE SCHEMAS ====================


class ScriptResponse(BaseModel):
    script: str


class DurationCheckResponse(BaseModel):
    duration: float  # seconds, one decimal
    word_count: int = Field(..., alias="wordCount")
    verdict: Optional[Verdict] = None
    margin_seconds: Optional[float] = Field(None, alias="marginSeconds")

    class Config:
        populate_by_name = True


class VoiceOut(BaseModel):
    voice_id: str
    name: str
    category: str = ""


class VoicesResponse(BaseModel):
    voices: List[VoiceOut]


class AudioResponse(BaseModel):
    audio_content: str = Field(..., alias="audioContent")  # base64 MPEG audio

    class Config:
        populate_by_name = True


class ErrorResponse(BaseModel):
    error: str
    code: str
