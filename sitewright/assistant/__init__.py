"""Natural-language edit planning."""

from sitewright.assistant.planner import AssistantReply, EditAssistant, PlanAction, ToolPlan, parse_plan
from sitewright.assistant.prompts import build_system_prompt

__all__ = [
    "AssistantReply",
    "EditAssistant",
    "PlanAction",
    "ToolPlan",
    "build_system_prompt",
    "parse_plan",
]
