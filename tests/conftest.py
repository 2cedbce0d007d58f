from __future__ import annotations

from pathlib import Path

import pytest

from rehearsal.config import settings
from rehearsal.db import session as db_session
from rehearsal.db.base import Base
from rehearsal.db.models import (  # noqa: F401
    Conversation,
    RehearsalSession,
    Script,
    ScriptAnalysis,
    ScriptEnhancement,
    User,
)
from rehearsal.modules.analytics.service import reset_analytics
from rehearsal.modules.scenarios.service import clear_scenario_cache


@pytest.fixture(autouse=True)
def _reset_db_and_defaults(tmp_path: Path) -> None:
    settings.env = "dev"
    settings.llm_api_key = ""
    settings.llm_base_url = "https://api.openai.com/v1"
    settings.llm_model = "gpt-4-turbo-preview"
    settings.llm_max_attempts = 1
    settings.jwt_secret = ""
    settings.scenarios_path = ""
    reset_analytics()
    clear_scenario_cache()
    db_session.rebind_engine(f"sqlite+pysqlite:///{tmp_path / 'rehearsal_test.db'}")
    Base.metadata.create_all(bind=db_session.engine)
    yield
    reset_analytics()
    clear_scenario_cache()
    Base.metadata.drop_all(bind=db_session.engine)
    db_session.engine.dispose()
