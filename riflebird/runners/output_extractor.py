"""Condense test runner output into something a model can act on."""

import os
import re
from dataclasses import dataclass, field
from typing import List, Optional

from riflebird.runners.test_runner import AssertionResult, TestFileResult, TestRunResult

MAX_FAILED_TESTS = 10
MAX_ERROR_CHARS = 2000

ANSI_CODES = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")
FAILED_TEST_LINE = re.compile(r"(?:✗|FAIL).*?$", re.MULTILINE)
ERROR_DETAILS = re.compile(r"(?:Error:|Expected.*but received|AssertionError:).*$", re.MULTILINE)
SYNTAX_ERROR = re.compile(r"SyntaxError:.*$", re.MULTILINE)


@dataclass
class FailedTestDetail:
    test_name: str
    full_name: str
    ancestor_titles: List[str] = field(default_factory=list)
    error_message: str = ""
    duration: Optional[float] = None


def strip_ansi_codes(text: str) -> str:
    return ANSI_CODES.sub("", text)


def _unique(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def extract_test_errors(result: TestRunResult) -> str:
    """Short failure summary from raw output. Empty for a passing run."""
    if result.success:
        return ""

    errors: List[str] = []
    if result.error:
        errors.append(result.error)

    output = strip_ansi_codes(result.stderr or result.stdout)

    failed = FAILED_TEST_LINE.findall(output)
    if failed:
        errors.append("Failed tests:")
        errors.extend(_unique(failed)[:MAX_FAILED_TESTS])
        if len(failed) > MAX_FAILED_TESTS:
            errors.append(f"... and {len(failed) - MAX_FAILED_TESTS} more failing tests")

    details = ERROR_DETAILS.findall(output)
    if details:
        errors.append("Error details:")
        errors.extend(_unique(details)[:3])

    syntax = SYNTAX_ERROR.findall(output)
    if syntax:
        errors.append("Syntax errors:")
        errors.extend(syntax)

    return "\n".join(errors) if errors else output[:1000]


def parse_failing_tests_from_json(result: TestRunResult) -> List[FailedTestDetail]:
    """Failed assertions from the JSON report, at most ten."""
    if result.success or result.json_report is None:
        return []

    failures: List[FailedTestDetail] = []
    for test_file in result.json_report.test_results:
        if test_file.status != "failed":
            continue
        failures.extend(_file_failures(test_file))
    return failures[:MAX_FAILED_TESTS]


def _file_failures(test_file: TestFileResult) -> List[FailedTestDetail]:
    failed = [a for a in test_file.assertion_results if a.status == "failed"]
    if failed:
        return [_assertion_detail(a) for a in failed]

    # The file failed without any failing assertion: a load or syntax error
    name = os.path.basename(test_file.name)
    return [
        FailedTestDetail(
            test_name="Test File Error",
            full_name=f"{name} (File Error)",
            ancestor_titles=[name],
            error_message=strip_ansi_codes(test_file.message or "Unknown test file error"),
            duration=test_file.end_time - test_file.start_time,
        )
    ]


def _assertion_detail(assertion: AssertionResult) -> FailedTestDetail:
    messages = []
    for message in assertion.failure_messages:
        clean = strip_ansi_codes(message)
        if len(clean) > MAX_ERROR_CHARS:
            clean = clean[:MAX_ERROR_CHARS] + "..."
        messages.append(clean)
    return FailedTestDetail(
        test_name=assertion.title,
        full_name=assertion.full_name,
        ancestor_titles=list(assertion.ancestor_titles),
        error_message="\n\n---\n\n".join(messages),
        duration=assertion.duration,
    )


def format_failing_tests(failed_tests: List[FailedTestDetail]) -> str:
    """Markdown listing of failures for the fix prompt."""
    if not failed_tests:
        return ""

    lines = [f"## Failed Tests ({len(failed_tests)})\n"]
    for index, test in enumerate(failed_tests, start=1):
        section = [f"### Test {index}: {test.test_name}"]
        if test.ancestor_titles:
            section.append(f"**Suite:** {' > '.join(test.ancestor_titles)}")
        if test.duration is not None:
            section.append(f"**Duration:** {test.duration:.2f}ms")
        section.append(f"\n**Error:**\n```\n{test.error_message}\n```")
        section.append("")
        lines.append("\n".join(section))
    return "\n".join(lines)


def summarize_failure(result: TestRunResult) -> str:
    """Structured failures when a report exists, raw output otherwise."""
    formatted = format_failing_tests(parse_failing_tests_from_json(result))
    return formatted or extract_test_errors(result)
