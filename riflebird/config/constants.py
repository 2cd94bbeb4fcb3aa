"""Static constants shared across Riflebird."""

from typing import Dict, Tuple

# Riflebird directory structure in the user's project
RIFLEBIRD_DIR = ".riflebird"
RIFLEBIRD_CACHE_FILE = "project-context.json"

DEFAULT_PACKAGE_FILE = "package.json"

# Agentic runner turn budget
DEFAULT_MAX_ITERATIONS = 8

# Extension substitution order for AI-requested paths. The requested
# extension itself is always skipped.
RELATED_EXTENSIONS: Dict[str, Tuple[str, ...]] = {
    ".ts": (".tsx", ".js", ".jsx", ".mts", ".cts"),
    ".tsx": (".ts", ".jsx", ".js"),
    ".js": (".jsx", ".ts", ".tsx", ".mjs", ".cjs"),
    ".jsx": (".js", ".tsx", ".ts"),
    ".mjs": (".js", ".mts", ".ts"),
    ".cjs": (".js", ".cts", ".ts"),
    ".mts": (".ts", ".mjs"),
    ".cts": (".ts", ".cjs"),
    ".vue": (".ts", ".js"),
    ".svelte": (".ts", ".js"),
}
EXTENSIONLESS_CANDIDATES: Tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx")

COMMON_EXCLUDE_DIRS: Tuple[str, ...] = (
    "node_modules",
    ".git",
    "dist",
    "build",
    ".next",
    "coverage",
    ".turbo",
    ".husky",
    ".vscode",
    ".idea",
    "out",
    "tmp",
    "temp",
    RIFLEBIRD_DIR,
)

# Files never picked as unit-test targets
DEFAULT_FILE_EXCLUDE_PATTERNS: Tuple[str, ...] = (
    "*.test.ts",
    "*.test.tsx",
    "*.test.js",
    "*.test.jsx",
    "*.spec.ts",
    "*.spec.tsx",
    "*.spec.js",
    "*.spec.jsx",
    "*.e2e.ts",
    "*.stories.ts",
    "*.stories.tsx",
    "*.stories.js",
    "*.stories.jsx",
    "*.config.ts",
    "*.config.js",
    "*.setup.ts",
    "*.setup.js",
    "*.d.ts",
)

# Config file discovery, first hit wins
LANGUAGE_CONFIG_CANDIDATES: Tuple[str, ...] = ("tsconfig.json", "jsconfig.json")
LINTER_CONFIG_CANDIDATES: Tuple[str, ...] = (
    "eslint.config.js",
    "eslint.config.mjs",
    "eslint.config.cjs",
    "eslint.config.ts",
    ".eslintrc.json",
    ".eslintrc.js",
    ".eslintrc.cjs",
    ".eslintrc",
    "biome.json",
)
FORMATTER_CONFIG_CANDIDATES: Tuple[str, ...] = (
    ".prettierrc",
    ".prettierrc.json",
    ".prettierrc.js",
    ".prettierrc.cjs",
    "prettier.config.js",
    "prettier.config.mjs",
)
UNIT_TEST_CONFIG_CANDIDATES: Dict[str, Tuple[str, ...]] = {
    "vitest": ("vitest.config.ts", "vitest.config.js", "vitest.config.mts"),
    "jest": ("jest.config.ts", "jest.config.js", "jest.config.cjs", "jest.config.json"),
    "mocha": (".mocharc.json", ".mocharc.js", ".mocharc.yml"),
}

# Lock file -> package manager
LOCK_FILES: Dict[str, str] = {
    "pnpm-lock.yaml": "pnpm",
    "yarn.lock": "yarn",
    "bun.lockb": "bun",
    "bun.lock": "bun",
    "package-lock.json": "npm",
}
