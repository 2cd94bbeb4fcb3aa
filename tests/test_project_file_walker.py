# Test suite for root-confined project file access

import pytest

from riflebird.exceptions.files import PathSecurityError, ProjectFileError
from riflebird.files.paths import (
    detect_test_output_strategy,
    generate_test_file_path,
    generate_test_file_path_with_config,
    is_test_file,
)
from riflebird.files.walker import ProjectFileWalker


class TestProjectFileWalker:
    @pytest.fixture
    def walker(self, temp_dir):
        return ProjectFileWalker(temp_dir)

    @pytest.mark.asyncio
    async def test_write_then_read(self, walker, temp_dir):
        await walker.write_file_to_project("nested/dir/file.ts", "hello")
        assert (temp_dir / "nested" / "dir" / "file.ts").read_text() == "hello"
        assert await walker.read_file_from_project("nested/dir/file.ts") == "hello"

    @pytest.mark.asyncio
    async def test_missing_file(self, walker):
        with pytest.raises(ProjectFileError) as exc_info:
            await walker.read_file_from_project("missing.ts")
        assert exc_info.value.operation == "read"

    @pytest.mark.asyncio
    async def test_escape_is_rejected(self, walker):
        with pytest.raises(PathSecurityError):
            await walker.read_file_from_project("../outside.txt")
        with pytest.raises(PathSecurityError):
            await walker.write_file_to_project("../outside.txt", "x")

    def test_absolute_path_inside_root_is_allowed(self, walker, temp_dir):
        target = temp_dir / "a.ts"
        assert walker.resolve_and_validate_path(str(target)) == target

    @pytest.mark.asyncio
    async def test_find_files_skips_excluded(self, walker, temp_dir):
        for rel in [
            "src/a.ts",
            "src/deep/b.ts",
            "src/a.test.ts",
            "src/types.d.ts",
            "node_modules/pkg/index.ts",
            "src/c.js",
        ]:
            path = temp_dir / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("x")

        found = await walker.find_files(["src/**/*.ts"])

        assert found == ["src/a.ts", "src/deep/b.ts"]

    @pytest.mark.asyncio
    async def test_find_files_bare_name(self, walker, temp_dir):
        (temp_dir / "lib").mkdir()
        (temp_dir / "lib" / "util.js").write_text("x")
        assert await walker.find_files(["util.js"]) == ["lib/util.js"]


class TestTestFilePaths:
    def test_insert_test_before_extension(self):
        assert generate_test_file_path("src/component.tsx") == "src/component.test.tsx"
        assert generate_test_file_path("script") == "script.test"

    def test_without_output_dir(self):
        assert generate_test_file_path_with_config("src/a.ts") == "src/a.test.ts"

    def test_root_strategy(self):
        assert (
            generate_test_file_path_with_config("src/a.ts", test_output_dir="tests/unit")
            == "tests/unit/src/a.test.ts"
        )

    def test_colocated_strategy(self):
        assert (
            generate_test_file_path_with_config("src/a.ts", test_output_dir="__tests__")
            == "src/__tests__/a.test.ts"
        )

    def test_explicit_strategy_wins(self):
        assert (
            generate_test_file_path_with_config(
                "src/a.ts", test_output_dir="__tests__", strategy="root"
            )
            == "__tests__/src/a.test.ts"
        )

    def test_strategy_detection(self):
        assert detect_test_output_strategy("./__tests__") == "colocated"
        assert detect_test_output_strategy("spec") == "colocated"
        assert detect_test_output_strategy("tests/unit") == "root"

    def test_is_test_file(self):
        assert is_test_file("a.test.ts")
        assert is_test_file("src/__tests__/a.ts")
        assert not is_test_file("src/a.ts")

    def test_is_test_file_matches_whole_segments(self):
        assert is_test_file("tests/helpers.ts")
        assert is_test_file("packages/core/tests/util.ts")
        assert not is_test_file("src/contests/x.ts")
        assert not is_test_file("src/latests/x.ts")
        assert not is_test_file("src/tests.ts")
