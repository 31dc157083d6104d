"""Command-line interface for running batch jobs."""

from __future__ import annotations

import argparse
import logging
import sys

from chunk_batch_framework.core.config.base import RunIdStrategy
from chunk_batch_framework.core.config.loader import load_job_config
from chunk_batch_framework.core.config.validator import dry_run, validate_job
from chunk_batch_framework.core.logging_config import TEXT_FORMAT, configure_logging
from chunk_batch_framework.repository import create_repository
from chunk_batch_framework.repository.exceptions import DuplicateRunError, RepositoryError
from chunk_batch_framework.repository.models import BatchStatus
from chunk_batch_framework.runner.hooks_builtin import build_listener
from chunk_batch_framework.runner.job import build_job
from chunk_batch_framework.runner.launcher import JobLauncher
from chunk_batch_framework.runner.run_id import create_run_id_generator
from chunk_batch_framework.runtime.exceptions import ComponentInstantiationError

logger = logging.getLogger(__name__)

EXIT_COMPLETED = 0
EXIT_FAILED = 1
EXIT_DUPLICATE_RUN = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cbf-run",
        description="Run a chunk-oriented batch job from a HOCON configuration file.",
    )
    parser.add_argument(
        "config",
        help="Path to the HOCON job configuration file.",
    )
    run_id = parser.add_mutually_exclusive_group()
    run_id.add_argument(
        "--run-id",
        default=None,
        help="Explicit run id. A run id that already has an execution is rejected.",
    )
    run_id.add_argument(
        "--run-id-strategy",
        choices=[s.value for s in RunIdStrategy],
        default=None,
        help="Generate the run id (default: the job file's run_id_strategy).",
    )
    parser.add_argument(
        "--restart",
        metavar="PREVIOUS_RUN_ID",
        default=None,
        help="Resume a FAILED or STOPPED run under a new run id.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Instantiate every reader, processor and writer without running the job.",
    )
    parser.add_argument(
        "--skip-validation",
        action="store_true",
        default=False,
        help="Skip pre-flight config validation.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override the job file's logging level.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for running jobs.

    Args:
        argv: Command-line arguments. Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code: 0 when the job completed, 1 when it failed, stopped or
        could not be loaded, 2 when the run id already has an execution.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level or "INFO"), format=TEXT_FORMAT)

    try:
        config = load_job_config(args.config)
    except Exception as exc:
        logger.error("Failed to load job: %s", exc)
        return EXIT_FAILED

    configure_logging(config.hooks.logging, level=args.log_level)

    if not args.skip_validation:
        validation = validate_job(config)
        for w in validation.warnings:
            logger.warning("Validation warning: %s", w)
        if not validation.is_valid:
            for error in validation.errors:
                logger.error("Validation error: %s", error.message)
            return EXIT_FAILED

    if args.dry_run:
        result = dry_run(config)
        if not result.is_valid:
            for error in result.errors:
                print(f"ERROR: {error.message}", file=sys.stderr)
            return EXIT_FAILED
        print(f"Dry run passed: {len(result.instantiated)} component(s) instantiated.")
        return EXIT_COMPLETED

    repository = create_repository(config.repository)
    try:
        job = build_job(config)
        launcher = JobLauncher(repository, listener=build_listener(config.hooks))
        run_id = args.run_id
        if run_id is None:
            strategy = RunIdStrategy(args.run_id_strategy) if args.run_id_strategy else config.run_id_strategy
            run_id = create_run_id_generator(strategy, repository).next_run_id(job.name)

        if args.restart:
            execution = launcher.restart(job, args.restart, run_id)
        else:
            execution = launcher.launch(job, run_id)
    except DuplicateRunError as exc:
        logger.error("%s", exc)
        return EXIT_DUPLICATE_RUN
    except (ComponentInstantiationError, RepositoryError, ValueError) as exc:
        logger.error("Failed to run job '%s': %s", config.name, exc)
        return EXIT_FAILED
    finally:
        repository.close()

    if execution.status is BatchStatus.COMPLETED:
        return EXIT_COMPLETED
    return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
