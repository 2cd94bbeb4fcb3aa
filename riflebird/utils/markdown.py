"""Markdown helpers for model output."""

import re

_CODE_BLOCK_RE = re.compile(r"^```[\w.+-]*[ \t]*\n?([\s\S]*?)\n?```$")


def strip_markdown_code_blocks(content: str) -> str:
    """
    Remove a single surrounding markdown code fence (```json, ```ts, ```).

    Text that is not entirely one fenced block is returned trimmed but
    otherwise untouched.
    """
    cleaned = content.strip()
    match = _CODE_BLOCK_RE.match(cleaned)
    if match:
        return match.group(1).strip()
    return cleaned


def clean_code_content(code: str) -> str:
    """Unwrap generated code only when the model fenced it."""
    if code.strip().startswith("```"):
        return strip_markdown_code_blocks(code)
    return code
