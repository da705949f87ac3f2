"""requires-python の下限で読み込めるソースかどうかのテスト"""
import ast
import sys
from pathlib import Path

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[2] / "location_resolver"
SOURCES = sorted(PACKAGE_ROOT.rglob("*.py"))


def _fstring_expressions(tree: ast.AST, source: str):
    for node in ast.walk(tree):
        if isinstance(node, ast.JoinedStr):
            for value in node.values:
                if isinstance(value, ast.FormattedValue):
                    yield ast.get_source_segment(source, value.value) or ""


@pytest.mark.parametrize("path", SOURCES, ids=lambda p: str(p.relative_to(PACKAGE_ROOT)))
def test_no_backslash_in_fstring_expression(path: Path) -> None:
    """f文字列の式部分にバックスラッシュがあると3.12未満ではSyntaxErrorになる"""
    source = path.read_text(encoding="utf-8")
    tree = ast.parse(source, filename=str(path))

    if sys.version_info >= (3, 12):
        offending = [expr for expr in _fstring_expressions(tree, source) if "\\" in expr]
        assert offending == []
