"""
Command line entry point for the smart car parking scenario.

Exit status is 0 when the simulation completed and 1 when any build,
submission or run step failed.
"""

import argparse
import logging
import sys
from typing import List, Optional

from simulation_environment import ScenarioConfig, Scenario, ScenarioState, MAX_SIMULATION_TIME
from endpoints import CAM_TRANSMISSION_TIME

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the hierarchical cloud/proxy/router/camera parking scenario."
    )
    parser.add_argument("--areas", type=int, default=1, help="Number of areas (routers) (default: 1)")
    parser.add_argument("--cameras", type=int, default=2, help="Cameras per area (default: 2)")
    parser.add_argument(
        "--period", type=float, default=CAM_TRANSMISSION_TIME,
        help=f"Camera emission period (default: {CAM_TRANSMISSION_TIME})",
    )
    parser.add_argument(
        "--cloud", action="store_true",
        help="Map every module to the cloud instead of placing edge-wards",
    )
    parser.add_argument(
        "--time", type=float, default=MAX_SIMULATION_TIME,
        help=f"Simulated time to run (default: {MAX_SIMULATION_TIME})",
    )
    parser.add_argument(
        "--emission", choices=["deterministic", "uniform", "normal"], default="deterministic",
        help="Emission distribution of the cameras (default: deterministic)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: $SCENARIO_SEED or 12345)")
    parser.add_argument("--trace", action="store_true", help="Log every processed tuple")
    parser.add_argument(
        "--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")
    return parser.parse_args(argv)


def setup_logging(level: str, log_file: Optional[str] = None) -> None:
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        format="[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=getattr(logging, level),
        handlers=handlers,
        force=True,
    )


def config_from_arguments(args: argparse.Namespace) -> ScenarioConfig:
    kwargs = dict(
        num_areas=args.areas,
        cameras_per_area=args.cameras,
        cam_transmission_time=args.period,
        is_cloud=args.cloud,
        simulation_time=args.time,
        emission=args.emission,
        trace=args.trace,
    )
    if args.seed is not None:
        kwargs["seed"] = args.seed
    return ScenarioConfig(**kwargs)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    setup_logging(args.log_level, args.log_file)

    logger.info("Starting smart car parking system...")
    scenario = Scenario(config_from_arguments(args))
    state = scenario.run()

    if state == ScenarioState.COMPLETED:
        logger.info("Simulation finished")
        return 0
    logger.error("Unwanted error occurred")
    return 1


if __name__ == "__main__":
    sys.exit(main())
