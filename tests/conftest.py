import sys
import tempfile
import textwrap
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from riflebird.agent.structs import ChatReply, Message
from riflebird.providers.base import BaseProvider


class ScriptedProvider(BaseProvider):
    """Replays canned replies and records every message list it was sent."""

    def __init__(self, replies: Sequence[str], repeat_last: bool = False):
        self._replies = list(replies)
        self._repeat_last = repeat_last
        self.calls: List[tuple] = []

    async def create_chat_completion(
        self,
        messages: Sequence[Message],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> ChatReply:
        self.calls.append(tuple(messages))
        index = len(self.calls) - 1
        if index >= len(self._replies):
            if not self._repeat_last:
                raise AssertionError("provider called more times than scripted")
            index = len(self._replies) - 1
        return ChatReply(content=self._replies[index], model=model)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def scripted_provider():
    return ScriptedProvider


FAKE_TEST_RUNNER = textwrap.dedent(
    """
    import json, sys, time

    args = sys.argv[1:]
    output = next(a.split("=", 1)[1] for a in args if a.startswith("--outputFile="))
    test_file = args[-1]
    mode = open(test_file).read().strip()

    if mode == "sleep":
        time.sleep(30)

    status = "passed" if mode == "pass" else "failed"
    report = {
        "numTotalTests": 1,
        "numFailedTests": 0 if status == "passed" else 1,
        "success": status == "passed",
        "testResults": [
            {
                "name": test_file,
                "status": status,
                "message": "",
                "startTime": 0,
                "endTime": 5,
                "assertionResults": [
                    {
                        "ancestorTitles": ["math"],
                        "fullName": "math adds",
                        "title": "adds",
                        "status": status,
                        "failureMessages": [] if status == "passed" else ["expected 2 to be 3"],
                    }
                ],
            }
        ],
    }
    with open(output, "w") as fh:
        json.dump(report, fh)
    print("ran", test_file)
    sys.exit(0 if status == "passed" else 1)
    """
)


@pytest.fixture
def fake_runner_command(temp_dir):
    """
    A test command that behaves like `vitest --reporter=json`.

    The test file's content decides the outcome: "pass", "fail" or "sleep".
    """
    (temp_dir / "fake_runner.py").write_text(FAKE_TEST_RUNNER)
    return f"{sys.executable} {temp_dir / 'fake_runner.py'}"
