from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Type, Union

from pydantic import BaseModel, ValidationError

from schemas.analysis import (
    ErrorSource,
    FitAnalysis,
    ImprovementSuggestions,
    ImprovementSuggestionsInput,
    InterviewScript,
    InterviewScriptInput,
    ResponseCritique,
    ResponseCritiqueInput,
    ResumeFitInput,
    TailoredResume,
    TailoredResumeInput,
)

from .invoker import StructuredPromptInvoker

NO_OUTPUT_MESSAGE = "No output received from the AI model."


class OperationError(Exception):
    """A failed operation, tagged with the operation that produced it."""

    def __init__(self, source: ErrorSource, message: str):
        super().__init__(message)
        self.source = source
        self.message = message


@dataclass(frozen=True)
class Operation:
    name: str
    source: ErrorSource
    input_model: Type[BaseModel]
    output_model: Type[BaseModel]

    async def run(
        self,
        invoker: StructuredPromptInvoker,
        payload: Union[BaseModel, Mapping[str, Any]],
    ) -> BaseModel:
        try:
            if not isinstance(payload, self.input_model):
                payload = self.input_model.parse_obj(payload)
        except ValidationError as exc:
            raise OperationError(self.source, f"Invalid input: {exc}") from exc

        try:
            result = await invoker.invoke(
                self.name, payload, self.input_model, self.output_model
            )
        except OperationError:
            raise
        except Exception as exc:
            raise OperationError(self.source, str(exc) or type(exc).__name__) from exc

        if result is None:
            raise OperationError(self.source, NO_OUTPUT_MESSAGE)
        if isinstance(result, self.output_model):
            return result
        try:
            return self.output_model.parse_obj(result)
        except ValidationError as exc:
            raise OperationError(self.source, f"Malformed output: {exc}") from exc


RESUME_FIT = Operation(
    name="analyze_resume_fit",
    source=ErrorSource.RESUME_FIT,
    input_model=ResumeFitInput,
    output_model=FitAnalysis,
)

IMPROVEMENT_SUGGESTIONS = Operation(
    name="suggest_resume_improvements",
    source=ErrorSource.IMPROVEMENT_SUGGESTIONS,
    input_model=ImprovementSuggestionsInput,
    output_model=ImprovementSuggestions,
)

INTERVIEW_SCRIPT = Operation(
    name="generate_interview_script",
    source=ErrorSource.INTERVIEW_SCRIPT,
    input_model=InterviewScriptInput,
    output_model=InterviewScript,
)

TAILORED_RESUME = Operation(
    name="generate_tailored_resume",
    source=ErrorSource.TAILORING,
    input_model=TailoredResumeInput,
    output_model=TailoredResume,
)

RESPONSE_CRITIQUE = Operation(
    name="analyze_user_response",
    source=ErrorSource.RESPONSE_ANALYSIS,
    input_model=ResponseCritiqueInput,
    output_model=ResponseCritique,
)

OPERATIONS = {
    op.name: op
    for op in (
        RESUME_FIT,
        IMPROVEMENT_SUGGESTIONS,
        INTERVIEW_SCRIPT,
        TAILORED_RESUME,
        RESPONSE_CRITIQUE,
    )
}
