import os
import sys


BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest


@pytest.fixture
def write_csv(tmp_path):
    def _write(name: str, text: str, *, bom: bool = False):
        path = tmp_path / name
        encoding = "utf-8-sig" if bom else "utf-8"
        path.write_text(text, encoding=encoding)
        return path

    return _write
