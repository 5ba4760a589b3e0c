import logging
import os
import sys


# Make `src/backend` importable (`import common...`) whatever directory pytest is started from.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest

DUTY_ENV_VARS = ("DUTY_RULES_STORE_PATH", "DUTY_DATASETS_DIR", "DUTY_DATA_SOURCE", "DUTY_LOG_LEVEL")


@pytest.fixture(autouse=True)
def _isolate_duty_env(monkeypatch):
    # A developer's .env must not leak into settings-dependent tests.
    for name in DUTY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _drop_stdout_log_handler():
    # configure_logging binds sys.stdout at call time, which pytest swaps per test.
    yield
    root = logging.getLogger()
    for handler in [h for h in root.handlers if h.get_name() == "duty-rules-stdout"]:
        root.removeHandler(handler)
