"""
Unit Test Writer
================

The healing loop. For each source file: generate a test through an
AgenticRunner, write it, type-check and run it, and on failure start a new
runner session with the failing code and its errors. Bounded by
healing_max_retries.
"""

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from riflebird.agent.runner import AgenticRunner
from riflebird.config.constants import DEFAULT_FILE_EXCLUDE_PATTERNS
from riflebird.config.settings import Settings
from riflebird.context.provider import ProjectContextProvider
from riflebird.exceptions.base import RiflebirdBaseError
from riflebird.exceptions.provider import is_fatal_provider_error
from riflebird.exceptions.writer import TestGenerationError
from riflebird.files.paths import generate_test_file_path_with_config, is_test_file
from riflebird.files.walker import ProjectFileWalker
from riflebird.models.project_context import ProjectContext
from riflebird.providers.base import BaseProvider
from riflebird.runners.output_extractor import extract_test_errors, summarize_failure
from riflebird.runners.test_runner import TestRunOptions, TestRunResult, run_test
from riflebird.runners.type_check import validate_typescript
from riflebird.writer.prompts import (
    UNIT_TEST_AGENTIC_PROMPT,
    UNIT_TEST_FIX_AGENTIC_PROMPT,
    PromptTemplateBuilder,
    TargetFile,
)

logger = logging.getLogger("UnitTestWriter")

ProgressCallback = Callable[[int, int, str, float], None]


@dataclass
class PatternResult:
    files: List[str] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)


@dataclass
class VerificationResult:
    passed: bool
    failure_details: str = ""
    test_result: Optional[TestRunResult] = None


class UnitTestWriter:
    def __init__(
        self,
        provider: BaseProvider,
        settings: Settings,
        context_provider: Optional[ProjectContextProvider] = None,
    ):
        self.provider = provider
        self.settings = settings
        self.context_provider = context_provider or ProjectContextProvider(
            settings.project_root,
            unit_test_output_strategy=settings.unit_test_output_strategy,
        )
        self.prompt_builder = PromptTemplateBuilder()

    async def write_tests_by_pattern(
        self,
        patterns: Sequence[str],
        on_progress: Optional[ProgressCallback] = None,
    ) -> PatternResult:
        """
        Write tests for every source file matching `patterns`.

        Per-file failures are collected. Rate-limit and authentication
        errors stop the whole batch.
        """
        context = await self.context_provider.get_context()
        walker = ProjectFileWalker(context.project_root)

        matched = await walker.find_files(patterns, DEFAULT_FILE_EXCLUDE_PATTERNS)
        files = [f for f in matched if not is_test_file(f)]
        logger.info(
            "Found %d files matching %s (%d after exclusions)",
            len(matched),
            ", ".join(patterns),
            len(files),
        )

        semaphore = asyncio.Semaphore(self.settings.concurrency)
        total = len(files)
        started = time.monotonic()
        completed = 0

        async def _process(source_path: str):
            nonlocal completed
            async with semaphore:
                try:
                    test_path = await self.write_test_file(context, source_path)
                    outcome = (source_path, test_path, None)
                except RiflebirdBaseError as e:
                    if is_fatal_provider_error(e):
                        raise
                    logger.error("Failed to write test for %s: %s", source_path, e.message)
                    outcome = (source_path, None, e.message)
                completed += 1
                if on_progress is not None:
                    on_progress(completed, total, source_path, time.monotonic() - started)
                return outcome

        tasks = [asyncio.create_task(_process(path)) for path in files]
        try:
            outcomes = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        result = PatternResult()
        for source_path, test_path, error in outcomes:
            if error is None:
                result.files.append(test_path)
            else:
                result.failures.append((source_path, error))
        return result

    async def write_test_file(self, context: ProjectContext, source_path: str) -> str:
        """
        Generate, write and verify the test for one source file.

        Returns the project-relative path of the test file.

        Raises:
            TestGenerationError: no passing test within the retry budget.
            ProviderRateLimitError, ProviderAuthenticationError: immediately.
        """
        walker = ProjectFileWalker(context.project_root)
        content = await walker.read_file_from_project(source_path)
        target = TargetFile(
            file_path=source_path,
            content=content,
            test_file_path=generate_test_file_path_with_config(
                source_path,
                test_output_dir=self.settings.test_output_dir,
                project_root=context.project_root,
                strategy=context.unit_test_output_strategy,
            ),
        )

        healing = self.settings.healing_enabled
        max_attempts = self.settings.healing_max_retries if healing else 1
        last_code: Optional[str] = None
        last_failure = ""

        for attempt in range(1, max_attempts + 1):
            try:
                if last_code is None:
                    code = await self.generate_test(context, target)
                else:
                    code = await self.fix_test(context, target, last_code, last_failure)
            except RiflebirdBaseError as e:
                if is_fatal_provider_error(e):
                    raise
                if attempt == max_attempts:
                    raise TestGenerationError(
                        f"Failed to process {source_path}: {e.message}",
                        source_path=source_path,
                        attempts=attempt,
                        original_error=e,
                    ) from e
                logger.info("Error on attempt %d for %s, retrying...", attempt, source_path)
                continue

            suffix = f" (fix attempt {attempt}/{max_attempts})" if attempt > 1 else ""
            logger.info("Writing test file %s%s", target.test_file_path, suffix)
            await walker.write_file_to_project(target.test_file_path, code)
            last_code = code

            if not healing:
                return target.test_file_path

            verification = await self.verify_test(context, target.test_file_path)
            if verification.passed:
                logger.info(
                    "Test passed for %s after %d attempt(s)", source_path, attempt
                )
                return target.test_file_path

            last_failure = verification.failure_details
            logger.info("Test failed (attempt %d/%d)", attempt, max_attempts)

        raise TestGenerationError(
            f"Test failed after {max_attempts} attempts. Last error:\n{last_failure[:500]}",
            source_path=source_path,
            attempts=max_attempts,
        )

    async def generate_test(self, context: ProjectContext, target: TargetFile) -> str:
        prompt = self.prompt_builder.build(
            UNIT_TEST_AGENTIC_PROMPT,
            target,
            test_framework=context.test_frameworks.unit,
            language_config=context.language_config,
            linter_config=context.linter_config,
            formatter_config=context.formatter_config,
        )
        return await self._new_runner(context).run(prompt)

    async def fix_test(
        self,
        context: ProjectContext,
        target: TargetFile,
        failed_code: str,
        failure_details: str,
    ) -> str:
        prompt = self.prompt_builder.build(
            UNIT_TEST_FIX_AGENTIC_PROMPT,
            target,
            test_framework=context.test_frameworks.unit,
            language_config=context.language_config,
            linter_config=context.linter_config,
            formatter_config=context.formatter_config,
            failed_test_code=failed_code,
            failing_tests_detail=failure_details or "No failure output was captured.",
        )
        return await self._new_runner(context).run(prompt)

    async def verify_test(self, context: ProjectContext, test_file_path: str) -> VerificationResult:
        """Type-check, then run the test file. Passing means both succeed."""
        if self.settings.typecheck_enabled:
            type_errors = await validate_typescript(
                test_file_path,
                context.project_root,
                timeout_ms=self.settings.typecheck_timeout_ms,
                react=context.uses_react,
            )
            if type_errors:
                return VerificationResult(
                    passed=False, failure_details=f"TypeScript errors:\n{type_errors}"
                )

        test_command = context.package_manager.test_command if context.package_manager else None
        if not test_command:
            logger.warning("No test command configured, skipping test verification")
            return VerificationResult(passed=True)

        result = await run_test(
            test_command,
            TestRunOptions(
                cwd=context.project_root,
                test_file_path=test_file_path,
                timeout_ms=self.settings.test_timeout_ms,
                framework=context.unit_framework_name,
            ),
        )

        if _own_file_passed(result, test_file_path, context.project_root):
            return VerificationResult(passed=True, test_result=result)

        details = summarize_failure(result)
        logger.debug("Test output:\n%s", extract_test_errors(result))
        return VerificationResult(passed=False, failure_details=details, test_result=result)

    def _new_runner(self, context: ProjectContext) -> AgenticRunner:
        return AgenticRunner(
            provider=self.provider,
            project_root=context.project_root,
            max_iterations=self.settings.max_iterations,
            model=self.settings.ai_model,
            temperature=self.settings.ai_temperature,
        )


def _own_file_passed(result: TestRunResult, test_file_path: str, project_root: str) -> bool:
    """A shared test script may run other files too; judge only ours when possible."""
    if result.json_report is None:
        return result.success
    expected = os.path.normpath(os.path.join(project_root, test_file_path))
    for file_result in result.json_report.test_results:
        # Reporters give absolute paths, or paths relative to the run directory
        reported = os.path.normpath(os.path.join(project_root, file_result.name))
        if reported == expected:
            return file_result.status == "passed"
    return result.success
