from dataclasses import dataclass
from typing import Union

from ..agents.schema import Agent
from ..context.store import ContextSnapshot, ContextStore


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str


class AgentPromptBuilder:
    """
    Responsible for constructing an agent's system and user prompts.

    Output depends only on the agent definition and the context it is
    given. Prior outputs are rendered in timeline order and are never
    truncated or summarized.
    """

    def build(self, agent: Agent, context: Union[ContextStore, ContextSnapshot]) -> Prompt:

        system = f"""
You are acting as: {agent.role}

Your goal:
{agent.goal}

Follow the goal strictly. Be concise, clear, and relevant.
""".strip()

        blocks = [f"User input:\n{context.user_input}"]

        timeline = tuple(context.timeline)
        if timeline:
            blocks.append("Previous agent outputs:")
            for record in timeline:
                blocks.append(f"--- {record.role} ({record.agent_id}) ---\n{record.output}")

        return Prompt(system=system, user="\n\n".join(blocks).strip())


_DEFAULT_BUILDER = AgentPromptBuilder()


def build_prompt(agent: Agent, context: Union[ContextStore, ContextSnapshot]) -> Prompt:
    return _DEFAULT_BUILDER.build(agent, context)
