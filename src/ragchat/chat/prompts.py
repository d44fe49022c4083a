"""Prompt templates for query rewriting and grounded answering."""

from __future__ import annotations

from typing import Iterable

from ragchat.models import ConversationTurn

DEFAULT_SUPPORT_EMAIL = "help@support.com"

STANDALONE_TEMPLATE = (
    "Given a question, convert it to a standalone question. "
    "question: {question} standalone question:"
)

ANSWER_TEMPLATE = """\
You are a helpful and enthusiastic support bot who can answer a given question based on \
the context provided. Try to find the answer in the context. Also use the conversation history \
to answer the question. If you really don't know the answer, say "I'm sorry, I don't know the \
answer to that." And direct the questioner to email {support_email}. Don't try to make up an \
answer. Always speak as if you were chatting to a friend.
conversation_history: {history}
context: {context}
question: {question}
answer:"""

NO_CONTEXT_MESSAGE = (
    "I don't have any context to form a reply. "
    "Please embed some information using the embed link above."
)


def render_history(turns: Iterable[ConversationTurn]) -> str:
    """Serialize turns as ``HUMAN:``/``AI:`` line pairs in insertion order."""
    lines = []
    for turn in turns:
        lines.append(f"HUMAN: {turn.question}")
        lines.append(f"AI: {turn.answer}")
    return "\n".join(lines)


def standalone_prompt(question: str) -> str:
    return STANDALONE_TEMPLATE.format(question=question)


def compose_prompt(
    question: str,
    context: str,
    history: str,
    *,
    support_email: str = DEFAULT_SUPPORT_EMAIL,
) -> str:
    return ANSWER_TEMPLATE.format(
        support_email=support_email,
        history=history,
        context=context,
        question=question,
    )
