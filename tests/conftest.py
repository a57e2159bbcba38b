"""Root-level test fixtures."""

import pytest


# Ensure no real credentials leak into tests
@pytest.fixture(autouse=True)
def _clear_env_keys(monkeypatch):
    for key in (
        "AI_GATEWAY_API_KEY",
        "DATABASE_URL",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "CLOUDWATCH_ENABLED",
    ):
        monkeypatch.delenv(key, raising=False)
