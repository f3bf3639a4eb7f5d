from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, validator


class ErrorSource(str, Enum):
    RESUME_FIT = "resume-fit"
    IMPROVEMENT_SUGGESTIONS = "improvement-suggestions"
    INTERVIEW_SCRIPT = "interview-script"
    TAILORING = "tailoring"
    TEXT_TO_SPEECH = "text-to-speech"
    SPEECH_TO_TEXT = "speech-to-text"
    RESPONSE_ANALYSIS = "response-analysis"
    UNKNOWN = "unknown"


class _Record(BaseModel):
    class Config:
        frozen = True


def split_skills(value) -> List[str]:
    """
    Split a comma-separated skills string, trimming entries and dropping blanks.
    Lists are normalized the same way so the rule can be applied twice safely.
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.split(",")
    else:
        parts = [str(item) for item in value]
    return [part.strip() for part in parts if part.strip()]


class AnalysisRequest(_Record):
    # Emptiness is checked by the pipeline, not here, so that an empty form
    # still reaches it and comes back as a classified error.
    resume_text: str = ""
    job_description_text: str = ""
    resume_skills: List[str] = Field(default_factory=list)

    @validator("resume_skills", pre=True)
    def coerce_skills(cls, v):  # type: ignore
        return split_skills(v)


MIN_FORM_TEXT_LENGTH = 50


class AnalysisForm(_Record):
    """What the browser form submits; enforces the minimum text lengths."""

    resume_text: str
    job_description_text: str
    resume_skills: str = ""

    @validator("resume_text")
    def resume_long_enough(cls, v: str) -> str:  # type: ignore
        if len(v.strip()) < MIN_FORM_TEXT_LENGTH:
            raise ValueError(
                f"Resume text must be at least {MIN_FORM_TEXT_LENGTH} characters."
            )
        return v

    @validator("job_description_text")
    def job_description_long_enough(cls, v: str) -> str:  # type: ignore
        if len(v.strip()) < MIN_FORM_TEXT_LENGTH:
            raise ValueError(
                f"Job description text must be at least {MIN_FORM_TEXT_LENGTH} characters."
            )
        return v

    def to_request(self) -> AnalysisRequest:
        return AnalysisRequest(
            resume_text=self.resume_text,
            job_description_text=self.job_description_text,
            resume_skills=self.resume_skills,
        )


# Operation inputs


class ResumeFitInput(_Record):
    resume: str = Field(..., min_length=1, description="The resume content as text.")
    job_description: str = Field(
        ..., min_length=1, description="The job description as text."
    )


class ImprovementSuggestionsInput(_Record):
    resume: str = Field(..., min_length=1)
    job_description: str = Field(..., min_length=1)


class InterviewScriptInput(_Record):
    job_description: str = Field(..., min_length=1)
    resume_skills: List[str] = Field(
        default_factory=list, description="Skills extracted from the resume."
    )


class TailoredResumeInput(_Record):
    original_resume: str = Field(..., min_length=1)
    job_description: str = Field(..., min_length=1)
    key_skills: List[str] = Field(
        default_factory=list, description="Key skills to emphasize."
    )


class ResponseCritiqueInput(_Record):
    transcribed_response: str = Field(..., min_length=1)
    interview_question: str = Field(..., min_length=1)


class SpeechSynthesisInput(_Record):
    text: str = Field(..., min_length=1)
    voice: Optional[str] = Field(
        default=None, description="Voice selector, unused by the placeholder provider."
    )


class TranscriptionInput(_Record):
    audio_data_uri: str
    language_hint: Optional[str] = None

    @validator("audio_data_uri")
    def require_data_uri(cls, v: str) -> str:  # type: ignore
        header, sep, _ = v.partition(",")
        if not sep or not header.startswith("data:") or not header.endswith(";base64"):
            raise ValueError("Expected format: 'data:audio/<format>;base64,<encoded_data>'")
        return v


# Operation outputs


class FitAnalysis(_Record):
    fit_score: int = Field(
        ..., ge=0, le=100, description="How well the resume matches the job (0-100)."
    )
    feedback: str
    suggestions: str = Field(
        ..., description="Improvements, possibly formatted as a numbered list."
    )


class ImprovementSuggestions(_Record):
    improvements: List[str] = Field(default_factory=list)


class InterviewScript(_Record):
    questions: List[str] = Field(default_factory=list)


class TailoredResume(_Record):
    tailored_resume_text: str


class ResponseCritique(_Record):
    communication_style: str
    confidence_level: str
    content_relevance: str
    overall_feedback: str


class SpeechAudio(_Record):
    audio_data_uri: str


class Transcript(_Record):
    transcription: str


# Outcomes


class FullAnalysisResult(_Record):
    kind: Literal["result"] = "result"
    fit_analysis: FitAnalysis
    improvement_suggestions: ImprovementSuggestions
    interview_script: InterviewScript


class ClassifiedError(_Record):
    kind: Literal["error"] = "error"
    message: str
    source: ErrorSource = ErrorSource.UNKNOWN


class OperationFailure(_Record):
    kind: Literal["error"] = "error"
    error: str
