# Test suite for the project context cache

import json
from unittest.mock import patch

import pytest

from riflebird.cache.manager import ProjectCacheManager
from riflebird.exceptions.files import ProjectFileError
from riflebird.models.project_context import (
    FrameworkInfo,
    PackageManager,
    ProjectContext,
    TestFrameworks,
)

TSCONFIG = '{"compilerOptions": {"strict": true}}'
ESLINT = "export default [];"
VITEST = "export default {};"
PACKAGE_JSON = '{"name": "demo", "scripts": {"test": "vitest"}}'


class TestProjectCacheManager:
    @pytest.fixture
    def project(self, temp_dir):
        (temp_dir / "tsconfig.json").write_text(TSCONFIG)
        (temp_dir / "eslint.config.js").write_text(ESLINT)
        (temp_dir / "vitest.config.ts").write_text(VITEST)
        (temp_dir / "package.json").write_text(PACKAGE_JSON)
        return temp_dir

    @pytest.fixture
    def context(self, project):
        return ProjectContext(
            project_root=str(project),
            language_config=FrameworkInfo(
                name="typescript", config_file_path="tsconfig.json", config_content=TSCONFIG
            ),
            linter_config=FrameworkInfo(
                config_file_path="eslint.config.js", config_content=ESLINT
            ),
            test_frameworks=TestFrameworks(
                unit=FrameworkInfo(
                    name="vitest", config_file_path="vitest.config.ts", config_content=VITEST
                )
            ),
            package_manager=PackageManager(
                type="npm",
                package_file_path="package.json",
                package_file_content=PACKAGE_JSON,
                test_command="npm run test",
            ),
        )

    @pytest.fixture
    def manager(self, project):
        return ProjectCacheManager(project, version="1.2.3")

    @pytest.mark.asyncio
    async def test_no_cache(self, manager):
        assert not await manager.has_cache()
        assert await manager.load() is None

    @pytest.mark.asyncio
    async def test_save_creates_versioned_document(self, manager, context, project):
        await manager.save(context)

        assert await manager.has_cache()
        path = project / ".riflebird" / "project-context.json"
        document = json.loads(path.read_text())
        assert document["riflebird_version"] == "1.2.3"
        assert document["language_config"]["config_content"] == TSCONFIG

    @pytest.mark.asyncio
    async def test_round_trip_without_changes_does_not_write(self, manager, context):
        await manager.save(context)

        with patch.object(manager, "save", wraps=manager.save) as save_spy:
            loaded = await manager.load()

        assert loaded == context
        save_spy.assert_not_called()

    @pytest.mark.asyncio
    async def test_modified_config_is_written_back_once(self, manager, context, project):
        await manager.save(context)
        (project / "tsconfig.json").write_text('{"compilerOptions": {}}')

        with patch.object(manager, "save", wraps=manager.save) as save_spy:
            loaded = await manager.load()

        assert loaded.language_config.config_content == '{"compilerOptions": {}}'
        assert loaded.linter_config == context.linter_config
        assert save_spy.call_count == 1

        # The written-back cache is now clean
        with patch.object(manager, "save", wraps=manager.save) as second_spy:
            again = await manager.load()
        assert again == loaded
        second_spy.assert_not_called()

    @pytest.mark.asyncio
    async def test_modified_package_manifest_is_refreshed(self, manager, context, project):
        await manager.save(context)
        (project / "package.json").write_text('{"name": "renamed"}')

        loaded = await manager.load()

        assert loaded.package_manager.package_file_content == '{"name": "renamed"}'

    @pytest.mark.asyncio
    async def test_whitespace_change_counts_as_change(self, manager, context, project):
        await manager.save(context)
        (project / "eslint.config.js").write_text(ESLINT + "\n")

        loaded = await manager.load()

        assert loaded.linter_config.config_content == ESLINT + "\n"

    @pytest.mark.asyncio
    async def test_deleted_config_invalidates(self, manager, context, project):
        await manager.save(context)
        (project / "vitest.config.ts").unlink()

        assert await manager.load() is None

    @pytest.mark.asyncio
    async def test_deleted_manifest_invalidates(self, manager, context, project):
        await manager.save(context)
        (project / "package.json").unlink()

        assert await manager.load() is None

    @pytest.mark.asyncio
    async def test_default_manifest_checked_without_package_manager(
        self, manager, context, project
    ):
        await manager.save(context.model_copy(update={"package_manager": None}))
        assert await manager.load() is not None

        (project / "package.json").unlink()
        assert await manager.load() is None

    @pytest.mark.asyncio
    async def test_corrupt_cache(self, manager, project):
        cache_dir = project / ".riflebird"
        cache_dir.mkdir()
        (cache_dir / "project-context.json").write_text("{not json")

        assert await manager.load() is None

    @pytest.mark.asyncio
    async def test_wrong_shape(self, manager, project):
        cache_dir = project / ".riflebird"
        cache_dir.mkdir()
        (cache_dir / "project-context.json").write_text('{"riflebird_version": "1.2.3"}')

        assert await manager.load() is None

    @pytest.mark.asyncio
    async def test_version_mismatch(self, manager, context, project):
        await ProjectCacheManager(project, version="0.0.1").save(context)

        assert await manager.load() is None

    @pytest.mark.asyncio
    async def test_save_swallows_write_errors(self, manager, context):
        with patch.object(
            manager.file_walker,
            "write_file_to_project",
            side_effect=ProjectFileError("disk full", operation="write"),
        ):
            await manager.save(context)

        assert not await manager.has_cache()

    @pytest.mark.asyncio
    async def test_clear(self, manager, context, project):
        await manager.save(context)

        assert await manager.clear()
        assert not await manager.has_cache()
        assert not (project / ".riflebird").exists()
        assert not await manager.clear()
