import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from dynamo_conditions.batch import COMMITTED, FAILED, REJECTED
from dynamo_conditions.errors import ConditionalCheckFailedException, ConfigError
from dynamo_conditions.item_store import Item, Key, KeySchema

logger = logging.getLogger(__name__)

EXPECTATIONS = (COMMITTED, REJECTED)


@dataclass
class Step:
    item: Item
    attribute_not_exists: List[str] = field(default_factory=list)
    expect: str = COMMITTED
    message: Optional[str] = None


@dataclass
class Scenario:
    name: str
    steps: List[Step]
    description: str = ""


@dataclass
class ScenarioResult:
    name: str
    outcomes: List[str] = field(default_factory=list)
    messages: List[Optional[str]] = field(default_factory=list)
    mismatches: List[str] = field(default_factory=list)
    final_items: Dict[Key, Optional[Item]] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return not self.mismatches


def _parse_step(scenario_name: str, index: int, raw: Any) -> Step:
    where = f"scenario '{scenario_name}' step {index}"
    if not isinstance(raw, dict) or not isinstance(raw.get("item"), dict):
        raise ConfigError(f"{where}: expected a mapping with an 'item' mapping")

    attributes = raw.get("attribute_not_exists") or []
    if isinstance(attributes, str):
        attributes = [attributes]
    if not isinstance(attributes, list) or not all(isinstance(a, str) and a for a in attributes):
        raise ConfigError(f"{where}: attribute_not_exists must be a list of attribute names")

    expect = raw.get("expect", COMMITTED)
    if expect not in EXPECTATIONS:
        raise ConfigError(f"{where}: expect must be one of {EXPECTATIONS}, got {expect!r}")

    return Step(item=raw["item"], attribute_not_exists=list(attributes), expect=expect, message=raw.get("message"))


def parse_scenarios(data: Any) -> List[Scenario]:
    if not isinstance(data, dict) or not isinstance(data.get("scenarios"), list):
        raise ConfigError("Scenario file must contain a top-level 'scenarios' list")

    scenarios = []
    for raw in data["scenarios"]:
        if not isinstance(raw, dict) or not raw.get("name"):
            raise ConfigError(f"Every scenario needs a name: {raw!r}")
        steps = [_parse_step(raw["name"], i, step) for i, step in enumerate(raw.get("steps") or [])]
        scenarios.append(Scenario(name=raw["name"], steps=steps, description=raw.get("description", "")))
    return scenarios


def load_scenarios(path: str = "config/scenarios.yaml") -> List[Scenario]:
    with open(Path(path), "r") as f:
        return parse_scenarios(yaml.safe_load(f))


def run_scenario(target: Any, scenario: Scenario, schema: Optional[KeySchema] = None, check_messages: bool = True) -> ScenarioResult:
    """Replay a scenario's steps against ``target`` in order.

    ``target`` exposes ``put_item`` and ``get_item``. Failure messages are only
    compared when ``check_messages`` is set, since a real table reports its own
    wording.
    """
    schema = schema or KeySchema()
    result = ScenarioResult(name=scenario.name)
    touched: List[Key] = []

    for i, step in enumerate(scenario.steps):
        message = None
        try:
            key = schema.key_of(step.item)
            if key not in touched:
                touched.append(key)
            target.put_item(step.item, step.attribute_not_exists)
            outcome = COMMITTED
        except ConditionalCheckFailedException as e:
            outcome = REJECTED
            message = e.message
        except Exception as e:
            logger.exception(f"💥 Step {i} of '{scenario.name}' failed unexpectedly")
            outcome = FAILED
            message = str(e)

        result.outcomes.append(outcome)
        result.messages.append(message)

        if outcome != step.expect:
            result.mismatches.append(f"step {i}: expected {step.expect}, got {outcome}")
        elif check_messages and step.message is not None and message != step.message:
            result.mismatches.append(f"step {i}: expected message {step.message!r}, got {message!r}")

    for key in touched:
        result.final_items[key] = target.get_item(key)

    verdict = "✅ passed" if result.passed else "❌ failed"
    logger.info(f"Scenario '{scenario.name}' {verdict}: {result.outcomes}")
    return result
