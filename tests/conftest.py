from __future__ import annotations

from collections.abc import Iterator

import pytest

from codezip_analyst.api.dependencies import get_session_store
from codezip_analyst.api.main import app


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep limit and provider settings from the developer's environment out of tests."""
    for name in (
        "CODEZIP_MAX_FILES",
        "CODEZIP_MAX_CHARS_PER_FILE",
        "CODEZIP_MAX_UPLOAD_BYTES",
        "CODEZIP_MAX_EXTRACTED_BYTES",
        "LLM_PROVIDER",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def api_store() -> Iterator[None]:
    """Reset the in-memory archive store and dependency overrides around API tests."""
    get_session_store().clear()
    yield
    get_session_store().clear()
    app.dependency_overrides.clear()


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Automatically add api_store fixture to tests in API test files."""
    for item in items:
        if "api" in item.path.stem.lower():
            item.add_marker(pytest.mark.usefixtures("api_store"))
