# Test suite for condensing test failures

from riflebird.runners.output_extractor import (
    extract_test_errors,
    format_failing_tests,
    parse_failing_tests_from_json,
    strip_ansi_codes,
    summarize_failure,
)
from riflebird.runners.test_runner import JsonTestReport, TestRunResult


def make_result(success=False, stdout="", stderr="", report=None, error=None):
    return TestRunResult(
        success=success,
        exit_code=0 if success else 1,
        stdout=stdout,
        stderr=stderr,
        duration=1.0,
        json_report=JsonTestReport.model_validate(report) if report else None,
        error=error,
    )


def failing_report(count=1):
    return {
        "success": False,
        "testResults": [
            {
                "name": "/project/src/a.test.ts",
                "status": "failed",
                "startTime": 10,
                "endTime": 15,
                "assertionResults": [
                    {
                        "ancestorTitles": ["suite", "nested"],
                        "fullName": f"suite nested case {i}",
                        "title": f"case {i}",
                        "status": "failed",
                        "duration": 1.5,
                        "failureMessages": ["\x1b[31mAssertionError: nope\x1b[39m"],
                    }
                    for i in range(count)
                ],
            }
        ],
    }


class TestOutputExtractor:
    def test_strip_ansi(self):
        assert strip_ansi_codes("\x1b[1m\x1b[31mred\x1b[0m") == "red"

    def test_passing_run_has_no_errors(self):
        assert extract_test_errors(make_result(success=True, stdout="FAIL")) == ""
        assert parse_failing_tests_from_json(make_result(success=True)) == []

    def test_extract_errors_from_output(self):
        output = "FAIL src/a.test.ts > adds\nError: expected 1 to be 2\nSyntaxError: Unexpected token"
        text = extract_test_errors(make_result(stderr=output, error="exit 1"))

        lines = text.splitlines()
        assert lines[0] == "exit 1"
        assert "Failed tests:" in lines
        assert "FAIL src/a.test.ts > adds" in lines
        assert "Error details:" in lines
        assert "Syntax errors:" in lines

    def test_extract_falls_back_to_raw_output(self):
        assert extract_test_errors(make_result(stdout="something odd")) == "something odd"

    def test_parse_failing_tests(self):
        failures = parse_failing_tests_from_json(make_result(report=failing_report()))

        assert len(failures) == 1
        assert failures[0].test_name == "case 0"
        assert failures[0].ancestor_titles == ["suite", "nested"]
        assert failures[0].error_message == "AssertionError: nope"

    def test_parse_failing_tests_is_capped(self):
        failures = parse_failing_tests_from_json(make_result(report=failing_report(15)))
        assert len(failures) == 10

    def test_file_level_error(self):
        report = {
            "testResults": [
                {
                    "name": "/project/src/b.test.ts",
                    "status": "failed",
                    "message": "Cannot find module './b'",
                    "startTime": 100,
                    "endTime": 130,
                    "assertionResults": [],
                }
            ]
        }
        failures = parse_failing_tests_from_json(make_result(report=report))

        assert failures[0].test_name == "Test File Error"
        assert failures[0].full_name == "b.test.ts (File Error)"
        assert failures[0].duration == 30

    def test_format(self):
        text = format_failing_tests(parse_failing_tests_from_json(make_result(report=failing_report())))
        assert text.startswith("## Failed Tests (1)")
        assert "### Test 1: case 0" in text
        assert "**Suite:** suite > nested" in text
        assert "**Duration:** 1.50ms" in text
        assert format_failing_tests([]) == ""

    def test_summarize_prefers_report(self):
        with_report = summarize_failure(make_result(report=failing_report(), stdout="raw"))
        without_report = summarize_failure(make_result(stdout="raw"))
        assert with_report.startswith("## Failed Tests")
        assert without_report == "raw"
