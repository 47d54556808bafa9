from pathlib import Path

import pytest


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small project tree with a few directories that are commonly ignored."""
    root = tmp_path.resolve() / "project"
    files = [
        "README.md",
        "main.go",
        "debug.log",
        "keep.log",
        "src/app.py",
        "src/util/helpers.py",
        "src/util/helpers.pyc",
        "build/out.bin",
        "node_modules/pkg/index.js",
        "docs/guide.md",
        "docs/build",
    ]
    for name in files:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"contents of {name}\n", encoding="utf-8")
    return root
