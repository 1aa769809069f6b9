"""Tests for repository-level documentation.

The README quick start is the first code most readers run, so its imports
must keep pointing at real names.
"""

import importlib
import re
from pathlib import Path

IMPORT_RE = re.compile(r"^from (presence[\w.]*) import (.+)$", re.MULTILINE)


def test_readme_exists(project_root: Path) -> None:
    """Ensure that a README file exists at the project root."""
    readme = project_root / "README.md"
    assert readme.exists(), "README.md should exist at the project root"


def test_readme_imports_resolve(project_root: Path) -> None:
    text = (project_root / "README.md").read_text()
    imports = IMPORT_RE.findall(text)
    assert imports, "README should show how to import the package"
    for module_name, names in imports:
        module = importlib.import_module(module_name)
        for name in names.split(","):
            assert hasattr(module, name.strip()), f"{module_name}.{name.strip()}"
