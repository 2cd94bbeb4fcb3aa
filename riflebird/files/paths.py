"""Where generated test files go."""

import os
import posixpath
from typing import Optional

COLOCATED_DIR_NAMES = (
    "__tests__",
    "__test__",
    "tests",
    "test",
    "__specs__",
    "__spec__",
    "specs",
    "spec",
)


def detect_test_output_strategy(test_output_dir: str) -> str:
    """'./__tests__' and bare '__tests__' style dirs are colocated, anything else is root."""
    if test_output_dir.startswith("./"):
        return "colocated"
    if "/" not in test_output_dir and test_output_dir in COLOCATED_DIR_NAMES:
        return "colocated"
    return "root"


def generate_test_file_path(file_path: str) -> str:
    """
    Insert `.test` before the extension.

    >>> generate_test_file_path("src/component.tsx")
    'src/component.test.tsx'
    """
    stem, ext = posixpath.splitext(file_path)
    if not ext:
        return f"{file_path}.test"
    return f"{stem}.test{ext}"


def generate_test_file_path_with_config(
    file_path: str,
    test_output_dir: Optional[str] = None,
    project_root: Optional[str] = None,
    strategy: Optional[str] = None,
) -> str:
    test_file_name = generate_test_file_path(file_path)
    if not test_output_dir:
        return test_file_name

    effective = strategy or detect_test_output_strategy(test_output_dir)

    if effective == "colocated":
        directory = posixpath.dirname(file_path)
        return posixpath.normpath(
            posixpath.join(directory, test_output_dir, posixpath.basename(test_file_name))
        )

    relative = file_path
    if project_root and os.path.isabs(file_path):
        relative = os.path.relpath(file_path, project_root).replace(os.sep, "/")
    return posixpath.normpath(
        posixpath.join(test_output_dir, generate_test_file_path(relative))
    )


TEST_DIR_NAMES = ("__tests__", "__test__", "tests")


def is_test_file(file_path: str) -> bool:
    """`.test.` or `.spec.` in the name, or any directory segment named like a test dir."""
    *directories, name = file_path.replace("\\", "/").split("/")
    if ".test." in name or ".spec." in name:
        return True
    return any(segment in TEST_DIR_NAMES for segment in directories)
