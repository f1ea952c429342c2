"""
Unit tests for the package import layout.

Modules import their siblings by absolute path; only package __init__ files
re-export with relative imports.
"""

# Standard library imports
import ast
from pathlib import Path

# Third-party imports
import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[2] / "enterprise_registry"

MODULES = sorted(
    path for path in PACKAGE_ROOT.rglob("*.py") if path.name != "__init__.py"
)


def relative_imports(path: Path) -> list[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    return [
        f"{path.relative_to(PACKAGE_ROOT)}:{node.lineno}"
        for node in ast.walk(tree)
        if isinstance(node, ast.ImportFrom) and node.level > 0
    ]


@pytest.mark.unit
class TestImportLayout:
    """Test how modules import each other."""

    def test_package_has_modules(self):
        assert any(path.name == "enterprise_repository.py" for path in MODULES)

    @pytest.mark.parametrize("path", MODULES, ids=lambda p: str(p.relative_to(PACKAGE_ROOT)))
    def test_module_uses_absolute_imports(self, path):
        assert relative_imports(path) == []
