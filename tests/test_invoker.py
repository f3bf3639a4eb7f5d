import asyncio

import pytest
from pydantic import ValidationError

from conftest import FakeChatClient, JOB_TEXT, RESUME_TEXT

from llm.client import _is_rate_limit_error, _safe_json_parse, build_client
from llm.invoker import PromptInvoker
from llm.prompts import PROMPTS
from schemas.analysis import (
    FitAnalysis,
    InterviewScript,
    InterviewScriptInput,
    ResumeFitInput,
)


def test_every_operation_has_a_prompt():
    assert set(PROMPTS) == {
        "analyze_resume_fit",
        "suggest_resume_improvements",
        "generate_interview_script",
        "generate_tailored_resume",
        "analyze_user_response",
    }


def test_render_lists_skills_as_bullets():
    invoker = PromptInvoker(FakeChatClient([]))
    prompt = invoker.render(
        "generate_interview_script",
        InterviewScriptInput(job_description=JOB_TEXT, resume_skills=["SQL", "Python"]),
    )
    assert "- SQL\n- Python" in prompt
    assert JOB_TEXT in prompt


def test_render_marks_missing_skills():
    invoker = PromptInvoker(FakeChatClient([]))
    prompt = invoker.render(
        "generate_interview_script", InterviewScriptInput(job_description=JOB_TEXT)
    )
    assert "- (none provided)" in prompt


def test_render_keeps_braces_in_user_text():
    invoker = PromptInvoker(FakeChatClient([]))
    prompt = invoker.render(
        "analyze_resume_fit",
        ResumeFitInput(resume="Built {templating} tools", job_description=JOB_TEXT),
    )
    assert "Built {templating} tools" in prompt


def test_invoke_validates_reply_against_output_model():
    client = FakeChatClient([{"fit_score": 88, "feedback": "Good", "suggestions": "1. More SQL"}])
    invoker = PromptInvoker(client)
    payload = ResumeFitInput(resume=RESUME_TEXT, job_description=JOB_TEXT)

    result = asyncio.run(
        invoker.invoke("analyze_resume_fit", payload, ResumeFitInput, FitAnalysis)
    )

    assert result == FitAnalysis(fit_score=88, feedback="Good", suggestions="1. More SQL")
    assert RESUME_TEXT in client.prompts[0]


def test_invoke_rejects_non_conforming_reply():
    invoker = PromptInvoker(FakeChatClient([{"questions": "not a list"}]))
    payload = InterviewScriptInput(job_description=JOB_TEXT, resume_skills=[])

    with pytest.raises(ValidationError):
        asyncio.run(
            invoker.invoke("generate_interview_script", payload, InterviewScriptInput, InterviewScript)
        )


def test_invoke_returns_none_for_empty_reply():
    invoker = PromptInvoker(FakeChatClient([{}]))
    payload = InterviewScriptInput(job_description=JOB_TEXT)

    result = asyncio.run(
        invoker.invoke("generate_interview_script", payload, InterviewScriptInput, InterviewScript)
    )

    assert result is None


def test_unknown_operation_raises_key_error():
    invoker = PromptInvoker(FakeChatClient([]))
    with pytest.raises(KeyError):
        invoker.render("summarize_cover_letter", ResumeFitInput(resume="a", job_description="b"))


def test_safe_json_parse_handles_wrapped_json():
    assert _safe_json_parse('{"questions": []}') == {"questions": []}
    assert _safe_json_parse('```json\n{"fit_score": 5}\n```') == {"fit_score": 5}
    assert _safe_json_parse("no json here") is None
    assert _safe_json_parse("[1, 2]") is None


def test_rate_limit_detection():
    class StatusError(Exception):
        status_code = 429

    assert _is_rate_limit_error(Exception("Rate limit reached for requests"))
    assert _is_rate_limit_error(StatusError("too many"))
    assert not _is_rate_limit_error(Exception("connection reset"))


def test_build_client_rejects_unknown_provider():
    with pytest.raises(ValueError):
        build_client("carrier pigeon", "key", "model")


def test_chat_json_repairs_invalid_json():
    from llm.client import _JSONChatMixin

    class ScriptedClient(_JSONChatMixin):
        def __init__(self, replies):
            self.replies = list(replies)
            self.prompts = []

        async def chat(self, prompt, *, max_retries=3):
            self.prompts.append(prompt)
            return self.replies.pop(0)

    client = ScriptedClient(["questions: oops", '{"questions": ["Why us?"]}'])
    assert asyncio.run(client.chat_json("prompt")) == {"questions": ["Why us?"]}
    assert "invalid JSON" in client.prompts[1]

    failing = ScriptedClient(["nope", "still nope"])
    with pytest.raises(ValueError):
        asyncio.run(failing.chat_json("prompt"))
