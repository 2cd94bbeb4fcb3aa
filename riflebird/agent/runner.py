"""
Agentic Runner
==============

Bounded multi-turn exchange with the model. Each turn makes exactly one
provider call. The model either returns final code or asks for more project
files, which are resolved and sent back as the next user message.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional, Union

from riflebird.agent.actions import decode_action
from riflebird.agent.resolver import FileReader, FileResolver
from riflebird.agent.structs import (
    Conversation,
    GenerateTest,
    Message,
    NotFound,
    RequestFiles,
    ResolutionOutcome,
)
from riflebird.config.constants import DEFAULT_MAX_ITERATIONS
from riflebird.exceptions.agent import (
    InvalidResponseFormatError,
    IterationLimitExceededError,
    UnknownActionError,
)
from riflebird.files.walker import ProjectFileWalker

if TYPE_CHECKING:
    from riflebird.providers.base import BaseProvider

logger = logging.getLogger("AgenticRunner")

FOLLOW_UP_PREAMBLE = "Here are the requested files:\n"
FOLLOW_UP_CLOSING = (
    "\n\nPlease proceed with generating the solution, "
    "or request more files if absolutely necessary."
)


def format_file_context(outcomes: Iterable[ResolutionOutcome]) -> str:
    """Build the follow-up message for one batch of resolved requests."""
    parts = []
    for outcome in outcomes:
        if isinstance(outcome, NotFound):
            attempted = ", ".join(outcome.attempted_paths)
            parts.append(
                f"\n--- FILE: {outcome.requested_path} ---\n"
                f"[File not found. Tried: {attempted}]\n"
            )
        elif outcome.substituted:
            parts.append(
                f"\n--- FILE: {outcome.requested_path} "
                f"(Resolved to {outcome.actual_path}) ---\n{outcome.content}\n"
            )
        else:
            parts.append(f"\n--- FILE: {outcome.requested_path} ---\n{outcome.content}\n")
    return FOLLOW_UP_PREAMBLE + "".join(parts) + FOLLOW_UP_CLOSING


class AgenticRunner:
    """
    Drives one conversation until the model produces code.

    Args:
        provider: the chat-completion backend.
        project_root: root for file requests; reads are confined to it.
        max_iterations: turn budget. The provider is called at most this many times.
        model / temperature: forwarded to the provider unchanged.
        file_reader: override for reading project files (defaults to a
            ProjectFileWalker on project_root).
    """

    def __init__(
        self,
        provider: "BaseProvider",
        project_root: Union[str, Path],
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        file_reader: Optional[FileReader] = None,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.provider = provider
        self.max_iterations = max_iterations
        self.model = model
        self.temperature = temperature

        if file_reader is None:
            file_reader = ProjectFileWalker(project_root).read_file_from_project
        self.resolver = FileResolver(file_reader)

    async def run(self, initial_prompt: str) -> str:
        """
        Run turns until the model returns code.

        Raises:
            InvalidResponseFormatError: a reply could not be decoded.
            UnknownActionError: a reply named an unsupported action.
            IterationLimitExceededError: the turn budget ran out.
            ProviderError: the provider call itself failed.
        """
        conversation = Conversation(Message(role="system", content=initial_prompt))

        for turn in range(1, self.max_iterations + 1):
            reply = await self.provider.create_chat_completion(
                conversation.snapshot(), model=self.model, temperature=self.temperature
            )
            content = reply.content
            if not isinstance(content, str) or not content.strip():
                raise InvalidResponseFormatError(
                    "AI returned empty or invalid content", raw_response=content
                )

            conversation.append(Message(role="assistant", content=content))
            action = decode_action(content)

            if isinstance(action, GenerateTest):
                logger.info("Agent produced code on turn %d", turn)
                return action.code

            if not isinstance(action, RequestFiles):
                raise UnknownActionError(getattr(action, "action", None), content)

            logger.info("Agent requested files: %s", ", ".join(action.files))
            outcomes = [await self.resolver.resolve(path) for path in action.files]
            conversation.append(Message(role="user", content=format_file_context(outcomes)))

        raise IterationLimitExceededError(self.max_iterations)
