from __future__ import annotations

from fastapi import FastAPI

from common.logging_config import configure_logging
from common.rules_engine.store import JsonFileRuleSetRepository, RuleSetRepository
from common.settings import get_settings

from .rules import router as rules_router


def create_app(repository: RuleSetRepository | None = None) -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Consumer Duty Rules")
    app.state.repository = repository or JsonFileRuleSetRepository(settings.rules_store_path)
    app.include_router(rules_router)
    return app
