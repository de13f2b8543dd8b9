#!/usr/bin/env python3
"""Replay a JSON scenario of exchange operations and print the results.

Usage:
    python scripts/replay_scenario.py scenario.json
    python scripts/replay_scenario.py scenario.json --json --log-level DEBUG

Scenario format:
    {
        "owner": "0x...",
        "operations": [
            {"kind": "create_asset", "address": "0x...", "symbol": "GLD",
             "holder": "0x...", "supply": "1000000000000000000"},
            {"kind": "create_pool", "caller": "0x...", "assetA": "0x...", "assetB": "0x..."},
            {"kind": "asset_approve", "asset": "0x...", "owner": "0x...", "spender": 0,
             "amount": "1000000000000000000"},
            {"kind": "provide_liquidity", "caller": "0x...", "pool": 0,
             "amountA": "200000000000000000", "amountB": "1000000000000000000"}
        ]
    }

Pools can be referenced by identifier or by creation index.
"""

import argparse
import json
import sys
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from divswap.config import PoolConfig, configure_logging  # noqa: E402
from divswap.engine import Exchange  # noqa: E402
from divswap.models.operations import Scenario  # noqa: E402

logger = structlog.get_logger()


def pool_report(exchange: Exchange) -> list[dict]:
    """Final state of every pool: reserves, k and share holdings."""
    report = []
    for pool_id in exchange.registry.get_pools():
        pool = exchange.pool(pool_id)
        reserve_a, reserve_b = pool.get_reserves()
        report.append(
            {
                "pool": pool_id,
                "symbol": pool.symbol,
                "reserves": [str(reserve_a), str(reserve_b)],
                "k": str(pool.get_k()),
                "totalShares": str(pool.total_supply),
                "holders": {account: str(pool.balance_of(account)) for account in pool.holders()},
            }
        )
    return report


def main() -> int:
    parser = argparse.ArgumentParser(description="Replay an exchange scenario")
    parser.add_argument("scenario", type=Path, help="Path to the scenario JSON file")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: DIVSWAP_LOG_LEVEL or INFO)",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON logs and results")
    parser.add_argument(
        "--events",
        action="store_true",
        help="Also print the emitted events after the results",
    )
    args = parser.parse_args()

    configure_logging(args.log_level, json=args.json)

    if not args.scenario.exists():
        logger.error("scenario_not_found", path=str(args.scenario))
        return 1

    with open(args.scenario) as f:
        scenario = Scenario.model_validate(json.load(f))

    exchange = Exchange.from_scenario(scenario, config=PoolConfig.from_env())
    results = exchange.run(scenario.operations)

    if args.json:
        output = {"results": [r.model_dump(mode="json") for r in results], "pools": pool_report(exchange)}
        if args.events:
            output["events"] = [e.model_dump(mode="json", by_alias=True) for e in exchange.events.events]
        print(json.dumps(output, indent=2))
    else:
        for r in results:
            status = "ok" if r.ok else f"FAILED ({r.error})"
            print(f"[{r.index:3d}] {r.kind:<18} {status}")
            if r.ok and r.value is not None:
                print(f"      -> {r.value}")
            elif not r.ok:
                print(f"      -> {r.detail}")
        print("\nPools:")
        for entry in pool_report(exchange):
            print(f"  {entry['symbol']} {entry['pool']}")
            print(f"      reserves {entry['reserves'][0]} / {entry['reserves'][1]}, k {entry['k']}")
            for account, balance in entry["holders"].items():
                print(f"      {account} holds {balance} of {entry['totalShares']}")
        if args.events:
            print("\nEvents:")
            for event in exchange.events.events:
                print(f"  {event.model_dump_json(by_alias=True)}")

    failed = sum(1 for r in results if not r.ok)
    print(f"\n{len(results) - failed}/{len(results)} operations succeeded")
    return 0


if __name__ == "__main__":
    sys.exit(main())
