import pytest
from pydantic import ValidationError

from conftest import JOB_TEXT, RESUME_TEXT

from schemas.analysis import (
    AnalysisForm,
    AnalysisRequest,
    ClassifiedError,
    ErrorSource,
    FitAnalysis,
    TranscriptionInput,
    split_skills,
)


def test_split_skills_discards_blank_entries():
    assert split_skills("Java, , SQL ,,Go") == ["Java", "SQL", "Go"]
    assert split_skills("") == []
    assert split_skills(None) == []
    assert split_skills([" SQL ", "", "Python"]) == ["SQL", "Python"]


def test_analysis_request_splits_comma_string():
    request = AnalysisRequest.parse_obj(
        {"resume_text": RESUME_TEXT, "job_description_text": JOB_TEXT, "resume_skills": "SQL, Python"}
    )
    assert request.resume_skills == ["SQL", "Python"]


def test_analysis_request_is_immutable():
    request = AnalysisRequest(resume_text=RESUME_TEXT, job_description_text=JOB_TEXT)
    with pytest.raises((TypeError, ValidationError)):
        request.resume_text = "changed"


def test_form_enforces_minimum_lengths():
    with pytest.raises(ValidationError) as info:
        AnalysisForm(resume_text="too short", job_description_text="also short")
    text = str(info.value)
    assert "Resume text must be at least 50 characters." in text
    assert "Job description text must be at least 50 characters." in text


def test_form_builds_request():
    form = AnalysisForm(resume_text=RESUME_TEXT, job_description_text=JOB_TEXT, resume_skills="SQL,,Go")
    request = form.to_request()
    assert request.resume_skills == ["SQL", "Go"]
    assert request.job_description_text == JOB_TEXT


def test_fit_score_range_is_declared():
    FitAnalysis(fit_score=0, feedback="", suggestions="")
    FitAnalysis(fit_score=100, feedback="", suggestions="")
    with pytest.raises(ValidationError):
        FitAnalysis(fit_score=-1, feedback="", suggestions="")


def test_transcription_input_requires_data_uri():
    TranscriptionInput(audio_data_uri="data:audio/webm;base64,GkXfow==")
    with pytest.raises(ValidationError):
        TranscriptionInput(audio_data_uri="https://example.com/clip.wav")
    with pytest.raises(ValidationError):
        TranscriptionInput(audio_data_uri="data:audio/wav,raw")


def test_classified_error_defaults_to_unknown():
    error = ClassifiedError(message="boom")
    assert error.source == ErrorSource.UNKNOWN
    assert error.kind == "error"
