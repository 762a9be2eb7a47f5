"""Agent package."""

from oracle_agent.agent.runtime import AgentRunRegistry, RunController

__all__ = ["AgentRunRegistry", "RunController"]
