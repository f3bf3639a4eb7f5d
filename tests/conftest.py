import asyncio
from typing import Any, Dict, List, Optional

import pytest


class StubInvoker:
    """Returns canned outputs per operation name and records every call."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None, delays: Optional[Dict[str, float]] = None):
        self.responses = dict(responses or {})
        self.delays = dict(delays or {})
        self.calls: List[tuple] = []

    async def invoke(self, operation_name, payload, input_model, output_model):
        self.calls.append((operation_name, payload))
        await asyncio.sleep(self.delays.get(operation_name, 0))
        response = self.responses.get(operation_name)
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, dict):
            return output_model.parse_obj(response)
        return response

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]


class FakeChatClient:
    """Chat client double for the prompt invoker."""

    def __init__(self, replies: List[Any]):
        self.replies = list(replies)
        self.prompts: List[str] = []

    async def chat(self, prompt: str, *, max_retries: int = 3) -> str:
        self.prompts.append(prompt)
        return self.replies.pop(0)

    async def chat_json(self, prompt: str, *, max_retries: int = 3):
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


CANNED = {
    "analyze_resume_fit": {
        "fit_score": 72,
        "feedback": "Strong SQL background; limited cloud exposure.",
        "suggestions": "1. Quantify reporting impact. 2. Mention Python automation.",
    },
    "suggest_resume_improvements": {
        "improvements": ["Add metrics to each bullet", "Move skills section to the top"],
    },
    "generate_interview_script": {
        "questions": [
            "Walk me through a complex SQL query you wrote.",
            "How have you used Python to automate a report?",
        ],
    },
    "generate_tailored_resume": {"tailored_resume_text": "Jane Doe\nData Analyst\nSQL, Python"},
    "analyze_user_response": {
        "communication_style": "Clear and concise.",
        "confidence_level": "Moderately confident.",
        "content_relevance": "Addresses the question directly.",
        "overall_feedback": "Add a concrete example with results.",
    },
}

RESUME_TEXT = (
    "Jane Doe. Data analyst with five years of experience writing SQL, "
    "building Python dashboards and presenting insights to leadership."
)
JOB_TEXT = (
    "Seeking a data analyst to own SQL reporting pipelines, automate analysis "
    "with Python and communicate findings to business stakeholders."
)


@pytest.fixture
def canned_invoker():
    return StubInvoker(dict(CANNED))


@pytest.fixture
def analysis_request():
    return {
        "resume_text": RESUME_TEXT,
        "job_description_text": JOB_TEXT,
        "resume_skills": "SQL, Python",
    }
