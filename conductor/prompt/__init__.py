from .builder import AgentPromptBuilder, Prompt, build_prompt

__all__ = ["AgentPromptBuilder", "Prompt", "build_prompt"]
