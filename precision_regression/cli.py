"""
Command line entry point.

Usage:
    python -m precision_regression --param squeezenet_v1.1.param --model squeezenet_v1.1.bin
    python -m precision_regression --config baseline --reference-only -v
    python -m precision_regression --list-configs

Exit code is 0 when every configuration/backend cell passes and 1 at the
first mismatch. Engine errors are not caught.
"""

import argparse
from typing import List, Optional

from .adapters import ENGINES
from .core.adapter import RunConfig
from .core.config_matrix import CANONICAL_CONFIGS, get_config
from .core.orchestrator import TestOrchestrator


def build_parser() -> argparse.ArgumentParser:
    defaults = RunConfig()
    parser = argparse.ArgumentParser(
        prog="precision-regression",
        description="Check classifier top-3 output on the synthetic logo across precision configurations",
    )
    parser.add_argument("--param", default=defaults.param_path,
                        help="Network structure file (default: %(default)s)")
    parser.add_argument("--model", default=defaults.model_path,
                        help="Network weight file (default: %(default)s)")
    parser.add_argument("--engine", choices=sorted(ENGINES), default="ncnn",
                        help="Inference engine adapter (default: %(default)s)")
    parser.add_argument("--config", action="append", dest="configs", metavar="NAME",
                        help="Run only this configuration; may be repeated")
    parser.add_argument("--reference-only", action="store_true",
                        help="Skip the accelerated backend even if present")
    parser.add_argument("--list-configs", action="store_true",
                        help="Print the configuration matrix and exit")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Print progress for every cell")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_configs:
        for config in CANONICAL_CONFIGS:
            print(f"{config.name:14s} epsilon={config.epsilon:g} {config.describe()}")
        return 0

    configs = CANONICAL_CONFIGS
    if args.configs:
        try:
            configs = tuple(get_config(name) for name in args.configs)
        except KeyError as e:
            parser.error(e.args[0])

    run_config = RunConfig(
        param_path=args.param,
        model_path=args.model,
        verbose=args.verbose,
    )
    orchestrator = TestOrchestrator(
        ENGINES[args.engine],
        run_config,
        configs=configs,
        include_accelerated=not args.reference_only,
    )
    outcome = orchestrator.run()
    return outcome.exit_code
