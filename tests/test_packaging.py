"""Tests for the project metadata in pyproject.toml."""

import re
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def test_readme_entry_points_at_a_project_readme():
    text = (PROJECT_ROOT / "pyproject.toml").read_text(encoding="utf-8")
    match = re.search(r'^readme\s*=\s*"([^"]+)"', text, re.MULTILINE)
    if match is None:
        return

    readme = match.group(1)
    assert Path(readme).name.upper().startswith("README")
    assert (PROJECT_ROOT / readme).is_file()
