import pytest
from transmog.env import (
	ENV_TRANSMOG_LIBRARY_MODULES,
	ENV_TRANSMOG_LOG_LEVEL,
	ENV_TRANSMOG_MAX_DEPTH,
	ENV_TRANSMOG_USER_MODULES,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):  # pyright: ignore[reportUnusedFunction]
	for name in (
		ENV_TRANSMOG_MAX_DEPTH,
		ENV_TRANSMOG_USER_MODULES,
		ENV_TRANSMOG_LIBRARY_MODULES,
		ENV_TRANSMOG_LOG_LEVEL,
	):
		monkeypatch.delenv(name, raising=False)
	yield
