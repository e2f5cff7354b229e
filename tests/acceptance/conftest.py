"""
Acceptance test fixtures: the real yq binary.

The evaluator speaks the yq v3 command line (`yq r <file> <expr>`), so the
acceptance tests are skipped unless a v3 yq is on PATH.
"""

from __future__ import annotations

import re
import shutil
import subprocess

import pytest


@pytest.fixture(scope="session")
def yq_binary() -> str:
    """Return the path of a yq v3 binary, or skip the test."""
    binary = shutil.which("yq")
    if binary is None:
        pytest.skip("yq is not installed")
    completed = subprocess.run([binary, "--version"], capture_output=True, text=True, check=False)
    if not re.search(r"version v?3\.", completed.stdout + completed.stderr):
        pytest.skip("yq v3 is required for the read command")
    return binary
