"""Worker pool manager - scales worker processes to the queue.

Usage:
    fleet-pool                          # Run the scaling loop
    fleet-pool --config my.yaml --dry-run
    fleet-pool --once                   # Run a single cycle and exit
    fleet-pool --status                 # Show pending work and resolved action
"""

import argparse
import dataclasses
import logging
import signal
import sys
from typing import List, Optional

import redis

from fleet_scaling.config import ScalingConfig, load_config, RedisSettings
from fleet_scaling.controller import ScalingController
from fleet_scaling.exceptions import FleetScalingError
from fleet_scaling.executor import ScalingActionExecutor
from fleet_scaling.process import ProcessWorkerOperator
from fleet_scaling.resolver import ScalingActionResolver
from fleet_scaling.sources import RedisFleetSource, RedisWorkloadSource, ResolvingActionProvider

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Worker pool manager")
    parser.add_argument("--config", default="config.yaml", help="Path to config file")
    parser.add_argument("--status", action="store_true", help="Show pool status and resolved action, then exit")
    parser.add_argument("--once", action="store_true", help="Run a single scaling cycle and exit")
    parser.add_argument("--dry-run", action="store_true", help="Log actions without executing")
    parser.add_argument("--poll-interval", type=int, default=None, help="Seconds between cycles")
    parser.add_argument("--target-duration", type=int, default=None, help="Seconds in which queued work should complete")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser


def resolve_settings(args: argparse.Namespace):
    """Load config file and apply CLI overrides."""
    config = load_config(args.config)
    scaling_config = ScalingConfig.from_dict(config.get("worker_scaling", {}))

    # CLI overrides, re-validated by replace()
    overrides = {}
    if args.poll_interval is not None:
        overrides["poll_interval"] = args.poll_interval
    if args.target_duration is not None:
        overrides["target_duration"] = args.target_duration
    if overrides:
        scaling_config = dataclasses.replace(scaling_config, **overrides)

    return scaling_config, RedisSettings.from_dict(config.get("redis_streams", {}))


def print_status(provider: ResolvingActionProvider, settings: RedisSettings) -> None:
    workload = provider.workload_source.get()
    workers = provider.fleet_source.get()
    action = provider.resolver.resolve_action(workload, workers)

    print("Worker Pool Status")
    print("=" * 40)
    print(f"Redis URL: {settings.url}")
    print(f"Stream: {settings.stream}")
    print(f"Consumer Group: {settings.consumer_group}")
    print()
    print(f"Pending Messages: {workload.waiting_requests}")
    print(f"Average Job Duration: {workload.average_job_duration.total_seconds():.1f}s")
    print(f"Required Workers: {provider.resolver.required_workers(workload)}")
    print(f"Active Workers: {workers.active_count()}")
    for worker_id, state in sorted(workers.instances.items(), key=lambda item: str(item[0])):
        print(f"  {worker_id}: {state.value}")
    print()
    print(f"Resolved Action: {action.name}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        scaling_config, settings = resolve_settings(args)
    except FleetScalingError as e:
        print(f"Error: {e}")
        return 1

    if not scaling_config.enabled and not args.status:
        logger.info("Worker scaling is disabled (worker_scaling.enabled is false), exiting")
        return 0

    try:
        client = redis.from_url(settings.url, decode_responses=True)
        client.ping()
    except redis.RedisError as e:
        print(f"Error connecting to Redis: {e}")
        return 1

    provider = ResolvingActionProvider(
        resolver=ScalingActionResolver(scaling_config.target_timedelta),
        workload_source=RedisWorkloadSource(
            client,
            settings.stream,
            settings.consumer_group,
            average_job_duration=scaling_config.average_job_timedelta,
        ),
        fleet_source=RedisFleetSource(client, scaling_config.fleet_key),
    )

    if args.status:
        try:
            print_status(provider, settings)
        except (redis.RedisError, FleetScalingError) as e:
            print(f"Error reading pool status: {e}")
            return 1
        return 0

    operator = ProcessWorkerOperator(
        client,
        fleet_key=scaling_config.fleet_key,
        config_path=args.config,
        worker_script=scaling_config.worker_script,
        dry_run=args.dry_run,
    )
    controller = ScalingController(
        ScalingActionExecutor(operator, provider),
        poll_interval=scaling_config.poll_interval,
        reaper=operator.reap,
    )

    if args.once:
        controller.run_cycle()
        return 0

    def signal_handler(sig, frame):
        logger.info("Shutting down scaling loop...")
        controller.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info(
        f"Scaling loop started: target={scaling_config.target_duration}s "
        f"poll_interval={scaling_config.poll_interval}s dry_run={args.dry_run}"
    )
    controller.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
