import logging
import signal
import sys
import argparse
from typing import List, Optional

from aws_embedded_metrics import metric_scope
from aws_embedded_metrics.config import get_config

from dynamo_conditions.batch import PutRequest, put_items
from dynamo_conditions.config_loader import load_config, key_schema
from dynamo_conditions.conditional_put import ConditionalPut
from dynamo_conditions.ddb_table import DDBReferenceTable
from dynamo_conditions.differential import compare_scenario
from dynamo_conditions.scenarios import load_scenarios, run_scenario

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("main")


def emit_metrics(metrics_config: dict, scenarios: int, mismatches: int, disagreements: int) -> None:
    get_config().environment = metrics_config["environment"]

    @metric_scope
    def emit(metrics):
        metrics.set_namespace(metrics_config["namespace"])
        metrics.put_dimensions({"Service": "ConditionalPutModel"})
        metrics.put_metric("ScenariosRun", scenarios, "Count")
        metrics.put_metric("ExpectationMismatches", mismatches, "Count")
        metrics.put_metric("ReferenceDisagreements", disagreements, "Count")
    emit()


def main(argv: Optional[List[str]] = None) -> int:

    parser = argparse.ArgumentParser(description="Replay conditional put scenarios against the in-memory model")
    parser.add_argument("--config", default="config/conditions_config.yaml", help="Configuration file path")
    parser.add_argument("--scenarios", default="config/scenarios.yaml", help="Scenario file path")
    parser.add_argument("--reference", action="store_true", help="Also replay every scenario against DynamoDB")
    parser.add_argument("--log-level", default=None, help="Override logging.level from the config")
    parser.add_argument("--race", type=int, default=0, help="Race this many guarded puts for one key and check exactly one wins")

    args = parser.parse_args(argv)

    config = load_config(args.config)
    logging.getLogger().setLevel((args.log_level or config["logging"]["level"]).upper())
    schema = key_schema(config)
    scenarios = load_scenarios(args.scenarios)
    aws = config["aws"]

    def reference_table():
        return DDBReferenceTable(
            region=aws["region"],
            schema=schema,
            table_prefix=aws["table_prefix"],
            endpoint_url=aws["endpoint_url"],
        )

    mismatches = disagreements = 0
    logger.info(f"🚀 Replaying {len(scenarios)} scenarios...")
    for scenario in scenarios:
        result = run_scenario(ConditionalPut(schema=schema), scenario, schema=schema)
        for mismatch in result.mismatches:
            logger.error(f"❌ '{scenario.name}' {mismatch}")
        mismatches += len(result.mismatches)

        if args.reference:
            comparison = compare_scenario(scenario, reference_table, schema=schema, cleanup=aws["delete_tables"])
            disagreements += len(comparison.differences)

    if args.race > 0:
        race_item = {schema.partition_key: "race", schema.sort_key: "race"}
        requests = [PutRequest(race_item, [schema.partition_key]) for _ in range(args.race)]
        race = put_items(ConditionalPut(schema=schema), requests, max_workers=config["workers"])
        if race.committed != 1:
            logger.error(f"❌ Race let {race.committed} of {args.race} puts commit")
            mismatches += 1

    if config["metrics"]["enabled"]:
        emit_metrics(config["metrics"], len(scenarios), mismatches, disagreements)

    logger.info(
        f"🏁 {len(scenarios)} scenarios, {mismatches} expectation mismatches, {disagreements} reference disagreements"
    )
    return 1 if mismatches or disagreements else 0

if __name__ == "__main__":
    signal.signal(signal.SIGINT, lambda s, f: sys.exit(0))
    signal.signal(signal.SIGTERM, lambda s, f: sys.exit(0))
    sys.exit(main())
