"""Control prompts for the reasoning loop."""

from ponder.types import FileContent

REASONING_SYSTEM_PROMPT = """You are a careful reasoner. Before answering, think about the user's request step by step.

Write your reasoning inside <think> and </think> tags. While thinking:

1. Restate what is actually being asked and what a good answer must contain.
2. Surface the assumptions hidden in the query and question them.
3. Point out any fallacies, ambiguities or false premises in the query.
4. Work through the problem in small, verifiable steps and check each one.
5. Note what you are unsure about and how you could resolve it.

Do NOT give the final answer yet. You will be told explicitly when to finalize."""

KEEP_THINKING_PROMPT = """Keep thinking. Review your previous reasoning inside <think> and </think> tags: look for mistakes, \
gaps and unexamined assumptions, explore alternatives, and refine your conclusions. Do NOT give the final answer yet."""

FINALIZE_SYSTEM_PROMPT = """Stop thinking now. Using the reasoning above, write the final answer for the user.

Do not include <think> tags or restate the reasoning process. Be direct and complete, and format the answer as Markdown."""


def render_file_context(item: FileContent) -> str:
    """Wrap one auxiliary file so the model can see where it came from."""
    return f"File: {item.path}\n```\n{item.content}\n```"
