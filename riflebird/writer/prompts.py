"""Prompt templates for agentic unit-test generation."""

import re
from dataclasses import dataclass
from typing import Dict, Optional

from riflebird.models.project_context import FrameworkInfo

RESPONSE_CONTRACT = """\
## Response format

Reply with a single JSON object and nothing else. Use exactly one of:

1. To read more project files before writing the test:
   {"action": "request_files", "files": ["src/utils/helper.ts"]}
   Paths are relative to the project root. Only request files you need.

2. When you are ready:
   {"action": "generate_test", "code": "<complete test file contents>"}
   The code must be the whole file. Do not wrap it in markdown.
"""

UNIT_TEST_AGENTIC_PROMPT = """\
You are an expert engineer writing unit tests with {{TEST_FRAMEWORK}}.

Write a complete, passing unit test file for the source file below.

## Source file: {{FILE_PATH}}
{{CODE_SNIPPET}}

## Test file location: {{TEST_FILE_PATH}}
Import the module under test relative to this location.

## Test framework configuration
{{TEST_FRAMEWORK_CONFIG}}

## Language configuration
{{LANGUAGE_CONFIGURATIONS}}

## Linting rules
{{LINTING_RULES}}

## Formatting rules
{{FORMATTING_RULES}}

Cover the public behavior, edge cases and error paths. Mock external
dependencies such as network and filesystem access.

""" + RESPONSE_CONTRACT

UNIT_TEST_FIX_AGENTIC_PROMPT = """\
You are an expert engineer fixing a failing {{TEST_FRAMEWORK}} unit test.

## Source file: {{FILE_PATH}}
{{CODE_SNIPPET}}

## Current test file: {{TEST_FILE_PATH}}
```
{{FAILED_TEST_CODE}}
```

## Failures
{{FAILING_TESTS_DETAIL}}

## Test framework configuration
{{TEST_FRAMEWORK_CONFIG}}

## Language configuration
{{LANGUAGE_CONFIGURATIONS}}

Fix the test so that it passes. Change the test, never the source file.
If a failure shows the source behaves differently than the test assumed,
trust the source.

""" + RESPONSE_CONTRACT


@dataclass
class TargetFile:
    file_path: str
    content: str
    test_file_path: str
    test_content: str = ""


class PromptTemplateBuilder:
    """Fills {{PLACEHOLDER}} markers with project configuration."""

    def build(
        self,
        template: str,
        target: TargetFile,
        test_framework: Optional[FrameworkInfo] = None,
        language_config: Optional[FrameworkInfo] = None,
        linter_config: Optional[FrameworkInfo] = None,
        formatter_config: Optional[FrameworkInfo] = None,
        **custom: str,
    ) -> str:
        values: Dict[str, str] = {
            "TEST_FRAMEWORK": (test_framework.name if test_framework else None)
            or "unknown framework",
            "TEST_FRAMEWORK_CONFIG": self.format_config(
                test_framework, "No specific configuration"
            ),
            "LANGUAGE_CONFIGURATIONS": self.format_config(
                language_config, "No specific language configuration"
            ),
            "LINTING_RULES": self.format_config(linter_config, "Follow project linting rules"),
            "FORMATTING_RULES": self.format_config(formatter_config, "Follow project conventions"),
            "FILE_PATH": target.file_path,
            "TEST_FILE_PATH": target.test_file_path,
            "CODE_SNIPPET": target.content,
        }
        for key, value in custom.items():
            values[key.upper()] = value

        # Single pass, so placeholder-looking text inside values is left alone
        return re.sub(
            r"\{\{([A-Z_]+)\}\}",
            lambda m: values.get(m.group(1), m.group(0)),
            template,
        )

    @staticmethod
    def format_config(config: Optional[FrameworkInfo], fallback: str = "") -> str:
        if config is None or not (config.config_content or config.config_file_path):
            return f"```\n{fallback}\n```" if fallback else ""
        content = config.config_content or fallback or "No configuration available"
        header = f"// {config.config_file_path}\n" if config.config_file_path else ""
        return f"```\n{header}{content}\n```"
