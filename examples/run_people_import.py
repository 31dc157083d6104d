"""People import demo: CSV file -> validation and nation coding -> SQLite.

Runs the job twice to show run id idempotency: the second launch with the
same run id is rejected without touching the data.

Usage:
    python examples/run_people_import.py
"""

from __future__ import annotations

import shutil
import sqlite3
from pathlib import Path

from chunk_batch_framework.core.config import load_job_config
from chunk_batch_framework.core.logging_config import configure_logging
from chunk_batch_framework.core.metrics import InMemoryRegistry
from chunk_batch_framework.repository import DuplicateRunError, create_repository
from chunk_batch_framework.runner import JobLauncher, build_job, build_listener

WORK_DIR = Path("/tmp/cbf-people")


def main() -> None:
    """Load the job, run it, print step counts and the imported rows."""
    shutil.rmtree(WORK_DIR, ignore_errors=True)
    WORK_DIR.mkdir(parents=True)

    # 1. Load HOCON configuration
    config = load_job_config(Path(__file__).parent / "people_import.conf")
    configure_logging(config.hooks.logging)
    print(f"Job  : {config.name} v{config.version}")
    print(f"Steps: {', '.join(s.name for s in config.steps)}")

    # 2. Build the job and a launcher with the built-in listeners
    registry = InMemoryRegistry()
    repository = create_repository(config.repository)
    try:
        job = build_job(config)
        launcher = JobLauncher(repository, listener=build_listener(config.hooks, registry))

        # 3. Run it
        execution = launcher.launch(job, run_id="1")
        print(f"\nJob status: {execution.status.value} ({execution.duration_ms} ms)")
        for step in execution.step_executions:
            print(f"  {step.step_name}: read={step.read_count} written={step.write_count} skipped={step.skip_count}")

        # 4. The same run id is never executed twice
        try:
            launcher.launch(job, run_id="1")
        except DuplicateRunError as exc:
            print(f"\nSecond launch rejected: {exc}")
    finally:
        repository.close()

    # 5. Show the output data
    print("\n--- person table ---")
    with sqlite3.connect(WORK_DIR / "people.db") as conn:
        for row in conn.execute("SELECT name, age, nation, address FROM person ORDER BY id"):
            print("  ", row)


if __name__ == "__main__":
    main()
