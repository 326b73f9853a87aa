from __future__ import annotations

from pathlib import Path

import pytest

from dynamo_conditions.conditional_put import ConditionalPut
from dynamo_conditions.item_store import ItemStore

ROOT_DIR = Path(__file__).resolve().parent.parent
SCENARIO_FILE = ROOT_DIR / "config" / "scenarios.yaml"
CONFIG_FILE = ROOT_DIR / "config" / "conditions_config.yaml"


@pytest.fixture
def store() -> ItemStore:
    return ItemStore()


@pytest.fixture
def dynamo(store: ItemStore) -> ConditionalPut:
    return ConditionalPut(store)


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never reaches for a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("DYNAMODB_ENDPOINT", raising=False)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    for item in items:
        path = Path(str(item.fspath))
        if "mock_aws" in path.read_text(encoding="utf-8", errors="ignore"):
            item.add_marker(pytest.mark.integration)
