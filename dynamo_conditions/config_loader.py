import yaml
from copy import deepcopy
from pathlib import Path
from typing import Dict, Any

from dynamo_conditions.errors import ConfigError
from dynamo_conditions.item_store import KeySchema

DEFAULT_CONFIG: Dict[str, Any] = {
    "aws": {
        "region": "us-east-1",
        "endpoint_url": None,
        "table_prefix": "conditions",
        "delete_tables": True,
    },
    "schema": {"partition_key": "pk", "sort_key": "sk"},
    "workers": 10,
    "logging": {"level": "INFO"},
    "metrics": {
        "enabled": False,
        "namespace": "DynamoDissected/ConditionExpressions",
        "environment": "local",
    },
}


def merge_config(overrides: Dict[str, Any]) -> Dict[str, Any]:
    config = deepcopy(DEFAULT_CONFIG)
    for section, value in overrides.items():
        if isinstance(config.get(section), dict):
            if not isinstance(value, dict):
                raise ConfigError(f"Config section '{section}' must be a mapping")
            config[section].update(value)
        else:
            config[section] = value
    return config


def load_config(config_path: str = "config/conditions_config.yaml") -> Dict[str, Any]:
    with open(Path(config_path), "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping, got {type(data).__name__}")
    return merge_config(data)


def key_schema(config: Dict[str, Any]) -> KeySchema:
    return KeySchema(config["schema"]["partition_key"], config["schema"]["sort_key"])
