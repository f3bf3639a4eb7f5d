from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol, Type, TypeVar

from pydantic import BaseModel

from .client import LLMClient
from .prompts import PROMPTS

logger = logging.getLogger(__name__)

OutputT = TypeVar("OutputT", bound=BaseModel)


class StructuredPromptInvoker(Protocol):
    async def invoke(
        self,
        operation_name: str,
        payload: BaseModel,
        input_model: Type[BaseModel],
        output_model: Type[OutputT],
    ) -> Optional[OutputT]: ...


class PromptInvoker:
    """
    Runs a named prompt template against a chat client and validates the
    JSON reply with the operation's output model.
    """

    def __init__(self, client: LLMClient, prompts: Optional[Mapping[str, str]] = None):
        self.client = client
        self.prompts = dict(PROMPTS if prompts is None else prompts)

    def render(self, operation_name: str, payload: BaseModel) -> str:
        try:
            template = self.prompts[operation_name]
        except KeyError:
            raise KeyError(f"No prompt registered for operation {operation_name!r}") from None
        return template.format(**_prompt_variables(payload.dict()))

    async def invoke(
        self,
        operation_name: str,
        payload: BaseModel,
        input_model: Type[BaseModel],
        output_model: Type[OutputT],
    ) -> Optional[OutputT]:
        if not isinstance(payload, input_model):
            payload = input_model.parse_obj(payload)
        prompt = self.render(operation_name, payload)
        logger.info("Invoking %s (%d prompt chars)", operation_name, len(prompt))
        data = await self.client.chat_json(prompt)
        if not data:
            return None
        return output_model.parse_obj(data)


def _prompt_variables(values: Dict[str, Any]) -> Dict[str, str]:
    rendered = {}
    for key, value in values.items():
        if isinstance(value, (list, tuple)):
            rendered[key] = _bullets(value)
        elif value is None:
            rendered[key] = ""
        else:
            rendered[key] = str(value)
    return rendered


def _bullets(items) -> str:
    if not items:
        return "- (none provided)"
    return "\n".join(f"- {item}" for item in items)
