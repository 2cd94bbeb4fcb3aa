"""
Action decoding for agentic replies.

The reply text must be a JSON object whose ``action`` field selects the
variant. The discriminant is checked before any other field is looked at.
"""

import json
import logging
from typing import Any, Dict

from riflebird.agent.structs import (
    GENERATE_TEST,
    REQUEST_FILES,
    AgentAction,
    GenerateTest,
    RequestFiles,
)
from riflebird.exceptions.agent import InvalidResponseFormatError, UnknownActionError
from riflebird.utils.markdown import clean_code_content, strip_markdown_code_blocks

logger = logging.getLogger("AgentActions")


def decode_action(text: str) -> AgentAction:
    """
    Decode one model reply into a GenerateTest or RequestFiles action.

    Raises:
        InvalidResponseFormatError: text is not a JSON object, or a known
            action carries a malformed payload.
        UnknownActionError: the discriminant is missing or not a known tag.
    """
    if not text or not text.strip():
        raise InvalidResponseFormatError(
            "AI response was empty", raw_response=text
        )

    try:
        payload = json.loads(strip_markdown_code_blocks(text))
    except json.JSONDecodeError as e:
        logger.debug("Failed to parse JSON reply: %s", text)
        raise InvalidResponseFormatError(
            "AI response was not valid JSON", raw_response=text, original_error=e
        ) from e

    if not isinstance(payload, dict):
        raise InvalidResponseFormatError(
            f"AI response must be a JSON object, got {type(payload).__name__}",
            raw_response=text,
        )

    action = payload.get("action")
    if action == GENERATE_TEST:
        return _decode_generate(payload, text)
    if action == REQUEST_FILES:
        return _decode_request(payload, text)

    raise UnknownActionError(action, raw_response=text)


def _decode_generate(payload: Dict[str, Any], raw: str) -> GenerateTest:
    code = payload.get("code")
    if not isinstance(code, str):
        raise InvalidResponseFormatError(
            "generate_test action requires a string 'code' field", raw_response=raw
        )
    return GenerateTest(code=clean_code_content(code))


def _decode_request(payload: Dict[str, Any], raw: str) -> RequestFiles:
    files = payload.get("files")
    if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
        raise InvalidResponseFormatError(
            "request_files action requires a 'files' list of strings",
            raw_response=raw,
        )
    return RequestFiles(files=tuple(files))
