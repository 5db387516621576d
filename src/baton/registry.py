"""Agent registry."""

from __future__ import annotations

import builtins
from collections.abc import Iterable
from typing import Any

from .errors import DuplicateAgentError
from .types import Agent


class AgentRegistry:
    """Name-indexed set of agents handed to the engine as ``agent_registry``."""

    def __init__(self, agents: Iterable[Agent[Any, Any]] = ()) -> None:
        self._agents: dict[str, Agent[Any, Any]] = {}
        for agent in agents:
            self.register(agent)

    def register(self, agent: Agent[Any, Any], *, replace: bool = False) -> Agent[Any, Any]:
        if agent.name in self._agents and not replace:
            raise DuplicateAgentError(agent.name)
        self._agents[agent.name] = agent
        return agent

    def has(self, name: str) -> bool:
        return name in self._agents

    def get(self, name: str) -> Agent[Any, Any] | None:
        return self._agents.get(name)

    def names(self) -> builtins.list[str]:
        return sorted(self._agents)

    def agents(self) -> builtins.list[Agent[Any, Any]]:
        return sorted(self._agents.values(), key=lambda item: item.name)

    def compact_rows(self) -> builtins.list[str]:
        rows: builtins.list[str] = []
        for agent in self.agents():
            tools = ",".join(agent.tool_names) or "-"
            handoffs = ",".join(sorted(agent.handoffs)) or "-"
            rows.append(f"{agent.name}: tools={tools} handoffs={handoffs}")
        return rows

    def validate(self) -> builtins.list[str]:
        """Report handoff targets and duplicate tool names that cannot work at run time."""
        problems: builtins.list[str] = []
        for agent in self.agents():
            for target in sorted(agent.handoffs):
                if target not in self._agents:
                    problems.append(f"{agent.name}: handoff target '{target}' is not registered")
            seen: set[str] = set()
            for tool_name in agent.tool_names:
                if tool_name in seen:
                    problems.append(f"{agent.name}: duplicate tool name '{tool_name}'")
                seen.add(tool_name)
        return problems

    def __contains__(self, name: object) -> bool:
        return name in self._agents

    def __len__(self) -> int:
        return len(self._agents)
