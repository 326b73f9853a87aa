import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from dynamo_conditions.conditional_put import ConditionalPut
from dynamo_conditions.item_store import KeySchema
from dynamo_conditions.scenarios import Scenario, ScenarioResult, run_scenario

logger = logging.getLogger(__name__)


@dataclass
class Comparison:
    scenario: str
    model: ScenarioResult
    reference: ScenarioResult
    differences: List[str] = field(default_factory=list)

    @property
    def agrees(self) -> bool:
        return not self.differences


def compare_results(model: ScenarioResult, reference: ScenarioResult) -> List[str]:
    differences = []
    for i, (ours, theirs) in enumerate(zip(model.outcomes, reference.outcomes)):
        if ours != theirs:
            differences.append(f"step {i}: model {ours}, reference {theirs}")
    if len(model.outcomes) != len(reference.outcomes):
        differences.append(f"model ran {len(model.outcomes)} steps, reference ran {len(reference.outcomes)}")

    keys = list(model.final_items) + [key for key in reference.final_items if key not in model.final_items]
    for key in keys:
        ours, theirs = model.final_items.get(key), reference.final_items.get(key)
        if ours != theirs:
            differences.append(f"{key}: model holds {ours}, reference holds {theirs}")
    return differences


def compare_scenario(
    scenario: Scenario,
    reference_factory: Callable[[], Any],
    schema: Optional[KeySchema] = None,
    cleanup: bool = True,
) -> Comparison:
    """Replay ``scenario`` on a fresh model and a fresh reference table and diff them.

    ``reference_factory`` builds an empty reference target per call; its
    ``delete()`` is invoked afterwards when ``cleanup`` is set.
    """
    schema = schema or KeySchema()
    model = run_scenario(ConditionalPut(schema=schema), scenario, schema=schema)

    reference_target = reference_factory()
    try:
        reference = run_scenario(reference_target, scenario, schema=schema, check_messages=False)
    finally:
        if cleanup:
            reference_target.delete()

    comparison = Comparison(scenario.name, model, reference, compare_results(model, reference))
    if comparison.agrees:
        logger.info(f"✅ Model agrees with reference on '{scenario.name}'")
    else:
        for difference in comparison.differences:
            logger.error(f"❌ '{scenario.name}' {difference}")
    return comparison
