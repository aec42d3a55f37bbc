from __future__ import annotations

import pytest

from methodmate.settings import MethodMateSettings


@pytest.fixture
def fast_settings() -> MethodMateSettings:
    return MethodMateSettings(chunk_pacing_ms=0, retry_delay_ms=0, retry_count=3)
