"""
Run a configured distribution from the command line.

"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from apportion.library.allocations import AllocationMode
from apportion.library.config import (
    DistributorConfig,
    build_distributor,
    load_distributor_config,
    parse_distributor_config,
)
from apportion.library.exceptions import ApportionError, ConfigurationError
from apportion.library.numeric import NumericKind, get_adapter


def parse_value(text: str, kind: NumericKind) -> Any:
    """
    Parse a command-line value for the given numeric kind.

    Integral kinds need an integer literal. Decimal values keep every digit
    of the literal.
    """
    adapter = get_adapter(kind)
    try:
        if kind is NumericKind.DECIMAL:
            return Decimal(text)
        if adapter.integral:
            return int(text)
        return float(text)
    except (ValueError, InvalidOperation) as e:
        raise ConfigurationError(
            f"Value '{text}' is not a valid {kind.value} literal."
        ) from e


def run_distribution(
    value: Any, length: int, config: DistributorConfig
) -> list[Any]:
    """
    Distribute value into a new buffer of ``length`` slots.

    Parameters
    ----------
    value
        Value to distribute, already parsed for ``config.kind``
    length
        Number of slots
    config
        Validated distributor configuration

    Returns
    -------
    list[Any]
        The distributed shares as plain Python numbers
    """
    distributor = build_distributor(config, length=length)
    if config.mode is AllocationMode.APPROXIMATE:
        target = distributor.allocate_approximate(value, length, kind=config.kind)
    else:
        target = distributor.allocate(value, length, kind=config.kind)
    return target if isinstance(target, list) else target.tolist()


def parse_params(params: Sequence[str] | None) -> dict[str, Any]:
    """Decode ``key=value`` pairs, reading values as JSON where possible."""
    parameters: dict[str, Any] = {}
    for param in params or []:
        if "=" not in param:
            raise ConfigurationError(
                f"Invalid parameter format: {param}\nExpected format: key=value"
            )
        key, value = param.split("=", 1)
        # JSON for numbers, booleans and lists, otherwise a plain string
        try:
            parameters[key] = json.loads(value)
        except (json.JSONDecodeError, ValueError):
            parameters[key] = value
    return parameters


def main(argv: Sequence[str] | None = None) -> None:
    """
    Command-line interface for running a distribution.

    Usage
    -----
    Distribute 30 units over a 7x7 noise grid biased towards its centre::

        python -m apportion.run_distribution
            --value 30
            --length 49
            --config conf/distributors/center_biased_grid.yaml
            --seed 42

    Override single configuration entries with dotted keys::

        python -m apportion.run_distribution --value 100 --length 4
            --param normalization.zero_sum_strategy=raise
    """
    parser = argparse.ArgumentParser(
        description="Distribute a value across slots with sampled weights"
    )
    parser.add_argument("--value", required=True, help="Value to distribute")
    parser.add_argument(
        "--length", required=True, type=int, help="Number of slots to distribute over"
    )
    parser.add_argument("--config", help="Distributor configuration YAML file")
    parser.add_argument(
        "--kind",
        choices=[kind.value for kind in NumericKind],
        help="Numeric kind of the result (overrides the config)",
    )
    parser.add_argument(
        "--approximate",
        action="store_true",
        help="Round each share independently instead of conserving the value",
    )
    parser.add_argument("--seed", type=int, help="Seed for reproducible weights")
    parser.add_argument(
        "--param",
        action="append",
        dest="params",
        help="Config override in dotted.key=value format (can be repeated)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        overrides = parse_params(args.params)
        if args.kind is not None:
            overrides["kind"] = args.kind
        if args.approximate:
            overrides["mode"] = AllocationMode.APPROXIMATE.value
        if args.seed is not None:
            overrides["sampler.seed"] = args.seed

        if args.config:
            config = load_distributor_config(args.config, overrides)
        else:
            config = parse_distributor_config({}, overrides)

        value = parse_value(args.value, config.kind)
        result = run_distribution(value, args.length, config)
    except ApportionError as e:
        sep_line = "=" * 80
        print(f"\n{sep_line}", file=sys.stderr)
        print("DISTRIBUTION FAILED", file=sys.stderr)
        print(sep_line, file=sys.stderr)
        print(f"\nError Kind: {e.kind.value if e.kind else type(e).__name__}", file=sys.stderr)
        print("\nError Details:", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print(f"\n{sep_line}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, default=str))


if __name__ == "__main__":
    main()
