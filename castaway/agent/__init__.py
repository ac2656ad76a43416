"""Agent orchestration - per-turn decision loop."""

from .agent import (
    AgentResult,
    AgentState,
    CastawayAgent,
    PlanKind,
)

__all__ = [
    "AgentResult",
    "AgentState",
    "CastawayAgent",
    "PlanKind",
]
