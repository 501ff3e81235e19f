"""EditAssistant — turns an instruction into executed tool calls."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from sitewright.assistant.prompts import build_system_prompt
from sitewright.errors import DraftMissing, ValidationError, Violation
from sitewright.llm.base import LLMProvider
from sitewright.tools.executor import ToolContext, ToolExecutionResult, ToolExecutor

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


class PlanAction(BaseModel):
    tool: str = Field(min_length=1)
    params: dict[str, Any] = Field(default_factory=dict)


class ToolPlan(BaseModel):
    actions: list[PlanAction] = Field(default_factory=list)
    reply: str = ""


class AssistantReply(BaseModel):
    reply: str
    results: list[ToolExecutionResult] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return all(r.success for r in self.results)


def parse_plan(text: str) -> ToolPlan:
    """Parse an LLM response into a ToolPlan.

    Accepts a bare JSON object or one wrapped in a fenced code block.
    """
    match = _FENCE.search(text)
    candidate = match.group(1) if match else text
    start, end = candidate.find("{"), candidate.rfind("}")
    if start == -1 or end < start:
        raise ValidationError([Violation(path="$", message="response contains no JSON object")])
    try:
        data = json.loads(candidate[start : end + 1])
    except json.JSONDecodeError as e:
        raise ValidationError([Violation(path="$", message=f"invalid JSON: {e.msg}")]) from e
    try:
        return ToolPlan.model_validate(data)
    except PydanticValidationError as e:
        violations = [
            Violation(path=".".join(str(p) for p in err["loc"]) or "$", message=err["msg"])
            for err in e.errors()
        ]
        raise ValidationError(violations, message="LLM returned an invalid tool plan") from e


class EditAssistant:
    """Plans edits with an LLM and applies them through the tool executor."""

    def __init__(self, llm: LLMProvider, executor: ToolExecutor) -> None:
        self.llm = llm
        self.executor = executor

    async def run(self, site_id: str, site_name: str, instruction: str) -> AssistantReply:
        content = self.executor.store.get(site_id)
        if content is None:
            raise DraftMissing(site_id)

        system = build_system_prompt(site_name, content, self.executor.registry.get_definitions())
        response = await self.llm.generate(system, instruction)
        logger.debug(
            "plan response for %s: %d output tokens", site_id, response.usage.output_tokens
        )
        plan = parse_plan(response.content)

        context = ToolContext(site_id=site_id)
        results = [self.executor.execute(a.tool, a.params, context) for a in plan.actions]
        failed = sum(1 for r in results if not r.success)
        logger.info(
            "assistant ran %d action(s) for %s (%d failed)", len(results), site_id, failed
        )
        reply = plan.reply or ("No changes were needed." if not results else "Changes applied.")
        return AssistantReply(reply=reply, results=results)
