# Test suite for project context discovery

import json

import pytest

from riflebird.cache.manager import ProjectCacheManager
from riflebird.context.provider import (
    ProjectContextProvider,
    build_test_command,
    detect_test_script,
)


class TestDetectTestScript:
    def test_unit_script_wins(self):
        scripts = {"test": "vitest", "test:unit": "vitest run", "test:e2e": "playwright"}
        assert detect_test_script(scripts) == "test:unit"

    def test_plain_test(self):
        assert detect_test_script({"build": "tsc", "test": "jest"}) == "test"

    def test_framework_named_script(self):
        assert detect_test_script({"jest": "jest --ci"}, ["jest"]) == "jest"
        assert detect_test_script({"test:vitest": "vitest"}, ["vitest"]) == "test:vitest"

    def test_any_test_prefixed_script(self):
        assert detect_test_script({"lint": "eslint", "test:ci": "jest --ci"}) == "test:ci"

    def test_nothing_found(self):
        assert detect_test_script({"build": "tsc"}) is None
        assert detect_test_script({}) is None


class TestBuildTestCommand:
    def test_with_script(self):
        assert build_test_command("pnpm", "test:unit") == "pnpm run test:unit"

    def test_without_script(self):
        assert build_test_command("yarn", None) == "yarn test"

    def test_unknown_manager_uses_npm(self):
        assert build_test_command("unknown", "test") == "npm run test"


class TestProjectContextProvider:
    @pytest.fixture
    def project(self, temp_dir):
        package = {
            "name": "demo",
            "scripts": {"test": "vitest run"},
            "devDependencies": {"vitest": "^1.0.0", "typescript": "^5.0.0"},
            "dependencies": {"react": "^18.0.0"},
        }
        (temp_dir / "package.json").write_text(json.dumps(package, indent=2))
        (temp_dir / "pnpm-lock.yaml").write_text("lockfileVersion: 6\n")
        (temp_dir / "tsconfig.json").write_text('{"compilerOptions": {"strict": true}}')
        (temp_dir / ".prettierrc").write_text('{"semi": false}')
        return temp_dir

    @pytest.mark.asyncio
    async def test_discover(self, project):
        context = await ProjectContextProvider(project).discover()

        assert context.project_root == str(project)
        assert context.language_config.name == "typescript"
        assert context.language_config.config_file_path == "tsconfig.json"
        assert '"strict": true' in context.language_config.config_content
        assert context.formatter_config.config_file_path == ".prettierrc"
        assert context.linter_config.config_file_path is None

        manager = context.package_manager
        assert manager.type == "pnpm"
        assert manager.lock_file_path == "pnpm-lock.yaml"
        assert manager.test_script == "test"
        assert manager.test_command == "pnpm run test"
        assert "react" in manager.dependencies

        # No vitest.config.*, so the framework comes from dependencies
        assert context.test_frameworks.unit.name == "vitest"
        assert context.uses_react

    @pytest.mark.asyncio
    async def test_framework_config_file(self, project):
        (project / "vitest.config.ts").write_text("export default {}\n")

        context = await ProjectContextProvider(project).discover()

        unit = context.test_frameworks.unit
        assert unit.name == "vitest"
        assert unit.config_file_path == "vitest.config.ts"
        assert unit.config_content == "export default {}\n"
        assert context.config_files.test_frameworks["unit"].config_file == "vitest.config.ts"

    @pytest.mark.asyncio
    async def test_without_package_json(self, temp_dir):
        context = await ProjectContextProvider(temp_dir).discover()

        assert context.package_manager is None
        assert context.test_frameworks.unit is None

    @pytest.mark.asyncio
    async def test_invalid_package_json(self, temp_dir):
        (temp_dir / "package.json").write_text("{not json")

        context = await ProjectContextProvider(temp_dir).discover()

        assert context.package_manager.type == "unknown"
        assert context.package_manager.test_command == "npm test"

    @pytest.mark.asyncio
    async def test_get_context_uses_cache(self, project):
        cache = ProjectCacheManager(project)
        provider = ProjectContextProvider(project, cache_manager=cache)

        first = await provider.get_context()
        assert await cache.has_cache()

        # A discovery-only change is invisible while the cache is valid
        (project / ".eslintrc.json").write_text("{}")
        second = await provider.get_context()
        assert second.linter_config.config_file_path is None
        assert second.model_dump() == first.model_dump()

        fresh = await provider.get_context(use_cache=False)
        assert fresh.linter_config.config_file_path == ".eslintrc.json"

    @pytest.mark.asyncio
    async def test_output_strategy_is_recorded(self, project):
        provider = ProjectContextProvider(project, unit_test_output_strategy="colocated")

        context = await provider.discover()

        assert context.unit_test_output_strategy == "colocated"
