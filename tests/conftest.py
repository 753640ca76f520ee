import textwrap
from pathlib import Path

import pytest

from easyaudit.collector import collect_files
from easyaudit.config import ScanConfiguration
from easyaudit.rules import ScanContext
from easyaudit.session import ScanSession


def _write(root: Path, files):
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
    return root


@pytest.fixture
def write_tree(tmp_path):
    """Write ``{relative path: content}`` below ``tmp_path`` and return the root."""

    def writer(files, root=None):
        return _write(Path(root) if root else tmp_path, files)

    return writer


@pytest.fixture
def scan_context(tmp_path):
    """Collect a tree and wrap it in a fresh ``ScanContext``."""

    def factory(root=None, **options):
        config = ScanConfiguration.build(root or tmp_path, **options)
        classification = collect_files(config).classification
        return ScanContext(files=classification, session=ScanSession(config.root), config=config)

    return factory
