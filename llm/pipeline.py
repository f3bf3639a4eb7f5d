from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from schemas.analysis import (
    AnalysisRequest,
    ClassifiedError,
    ErrorSource,
    FullAnalysisResult,
    OperationFailure,
    ResponseCritique,
    SpeechAudio,
    SpeechSynthesisInput,
    TailoredResume,
    Transcript,
    TranscriptionInput,
    split_skills,
)
from speech.providers import NullSpeechProvider, SpeechProvider

from .invoker import StructuredPromptInvoker
from .operations import (
    IMPROVEMENT_SUGGESTIONS,
    INTERVIEW_SCRIPT,
    RESPONSE_CRITIQUE,
    RESUME_FIT,
    TAILORED_RESUME,
    OperationError,
)

logger = logging.getLogger(__name__)

EMPTY_INPUT_MESSAGE = "Resume and Job Description text cannot be empty."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred during analysis."

Payload = Union[BaseModel, Mapping[str, Any]]


class CareerFitPipeline:
    """
    Fans one submission out to the analysis operations and exposes the
    single-operation entry points used by the interactive interview.

    Every public coroutine returns a value; failures come back as
    ``ClassifiedError`` or ``OperationFailure`` instead of being raised.
    """

    def __init__(
        self,
        invoker: StructuredPromptInvoker,
        speech: Optional[SpeechProvider] = None,
    ):
        self.invoker = invoker
        self.speech = speech if speech is not None else NullSpeechProvider()

    async def perform_full_analysis(
        self, request: Union[AnalysisRequest, Mapping[str, Any]]
    ) -> Union[FullAnalysisResult, ClassifiedError]:
        try:
            if not isinstance(request, AnalysisRequest):
                request = AnalysisRequest.parse_obj(request)
            if not request.resume_text or not request.job_description_text:
                return ClassifiedError(message=EMPTY_INPUT_MESSAGE, source=ErrorSource.UNKNOWN)

            skills = split_skills(request.resume_skills)
            if not skills:
                logger.warning(
                    "No resume skills provided for interview script generation. "
                    "Proceeding with job description only."
                )

            pair = {
                "resume": request.resume_text,
                "job_description": request.job_description_text,
            }
            # Join all three, then pick the failure in declaration order so the
            # reported source does not depend on completion order.
            outcomes = await asyncio.gather(
                RESUME_FIT.run(self.invoker, pair),
                IMPROVEMENT_SUGGESTIONS.run(self.invoker, pair),
                INTERVIEW_SCRIPT.run(
                    self.invoker,
                    {
                        "job_description": request.job_description_text,
                        "resume_skills": skills,
                    },
                ),
                return_exceptions=True,
            )
            errors = [_classify(o) for o in outcomes if isinstance(o, BaseException)]
            if errors:
                return errors[0]

            fit, improvements, script = outcomes
            return FullAnalysisResult(
                fit_analysis=fit,
                improvement_suggestions=improvements,
                interview_script=script,
            )
        except Exception as exc:
            return _classify(exc)

    async def get_text_to_speech(
        self, payload: Payload
    ) -> Union[SpeechAudio, OperationFailure]:
        try:
            request = _coerce(SpeechSynthesisInput, payload)
            return await self.speech.synthesize(request)
        except Exception as exc:
            return _failure("get_text_to_speech", exc, "Failed to synthesize speech.")

    async def get_speech_to_text(
        self, payload: Payload
    ) -> Union[Transcript, OperationFailure]:
        try:
            request = _coerce(TranscriptionInput, payload)
            return await self.speech.transcribe(request)
        except Exception as exc:
            return _failure("get_speech_to_text", exc, "Failed to transcribe speech.")

    async def analyze_spoken_response(
        self, payload: Payload
    ) -> Union[ResponseCritique, OperationFailure]:
        try:
            return await RESPONSE_CRITIQUE.run(self.invoker, payload)
        except Exception as exc:
            return _failure("analyze_spoken_response", exc, "Failed to analyze response.")

    async def generate_tailored_resume(
        self, payload: Payload
    ) -> Union[TailoredResume, OperationFailure]:
        # key_skills arrive already split by the caller.
        try:
            return await TAILORED_RESUME.run(self.invoker, payload)
        except Exception as exc:
            return _failure(
                "generate_tailored_resume", exc, "Failed to generate tailored resume."
            )


def _coerce(model, payload):
    if isinstance(payload, model):
        return payload
    return model.parse_obj(payload)


def _classify(exc: BaseException) -> ClassifiedError:
    if isinstance(exc, OperationError):
        logger.error("Full analysis failed (%s): %s", exc.source.value, exc.message)
        return ClassifiedError(
            message=f"Error in {exc.source.value}: {exc.message}",
            source=exc.source,
        )
    logger.error("Full analysis failed: %s", exc, exc_info=exc)
    return ClassifiedError(
        message=str(exc) or UNEXPECTED_ERROR_MESSAGE, source=ErrorSource.UNKNOWN
    )


def _failure(entry_point: str, exc: Exception, default: str) -> OperationFailure:
    logger.error("Error in %s: %s", entry_point, exc)
    if isinstance(exc, OperationError):
        message = exc.message
    elif isinstance(exc, ValidationError):
        message = f"Invalid input: {exc}"
    else:
        message = str(exc)
    return OperationFailure(error=message or default)
