from collections.abc import Iterator

import pytest

from greenhouse.config import ENV_KEYS


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    # Settings are read from the process environment; keep tests hermetic
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("greenhouse.config.load_dotenv", lambda *_a, **_k: False)
    yield
