"""
tests/test_layering.py
Enforce architectural layering:
  core      → may NOT import web, reporting, main
  utils     → may NOT import web, reporting, main; only utils.validators
              may import core (core.models)
  reporting → may NOT import web, main

Run: pytest tests/test_layering.py -v
"""

import sys, os, ast
from pathlib import Path

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))


def get_imports(filepath: Path) -> list[str]:
    """Extract all imported module names from a Python file."""
    tree = ast.parse(filepath.read_text())
    imports = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.append(alias.name)
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                imports.append(node.module)
    return imports


class TestLayering:
    def _check(self, package: str, forbidden: set[str]):
        pkg_dir = ROOT / package
        assert pkg_dir.is_dir(), f"missing package {package}"
        for pyfile in pkg_dir.rglob("*.py"):
            for imp in get_imports(pyfile):
                top = imp.split(".")[0]
                assert top not in forbidden, (
                    f"LAYERING VIOLATION in {pyfile.relative_to(ROOT)}: "
                    f"'{package}' imports '{top}' — "
                    f"forbidden packages: {forbidden}"
                )

    def test_core_is_self_contained(self):
        self._check("core", {"web", "reporting", "main"})

    def test_utils_does_not_import_frontends(self):
        self._check("utils", {"web", "reporting", "main"})

    def test_reporting_does_not_import_web(self):
        self._check("reporting", {"web", "main"})

    def test_core_does_not_import_validators(self):
        for pyfile in (ROOT / "core").rglob("*.py"):
            assert "utils.validators" not in get_imports(pyfile), (
                f"LAYERING VIOLATION in {pyfile.relative_to(ROOT)}: "
                f"core imports utils.validators"
            )

    def test_only_validators_reach_into_core(self):
        for pyfile in (ROOT / "utils").rglob("*.py"):
            core_imports = [i for i in get_imports(pyfile) if i.split(".")[0] == "core"]
            if pyfile.name == "validators.py":
                assert core_imports == ["core.models"]
            else:
                assert core_imports == [], (
                    f"LAYERING VIOLATION in {pyfile.relative_to(ROOT)}: {core_imports}"
                )

    def test_utils_package_does_not_reexport_validators(self):
        imports = get_imports(ROOT / "utils" / "__init__.py")
        assert "utils.validators" not in imports

    def test_engine_uses_no_blocking_sockets(self):
        imports = get_imports(ROOT / "core" / "scanner_engine.py")
        assert "socket" not in imports
        assert "threading" not in imports


if __name__ == "__main__":
    import pytest
    pytest.main([__file__, "-v"])
