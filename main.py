"""Questly — dev launcher. Seeds demo data, validates the story, starts the API."""

import argparse
import os
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
BACKEND_PORT = os.getenv("BACKEND_PORT", "13013")


def validate(data_dir: Path, start_event_id: str) -> int:
    from questly.graph import format_issue, has_errors, validate_event_graph
    from questly.store import JsonEventStore

    events = JsonEventStore(data_dir).list_events()
    issues = validate_event_graph(events, start_event_id)
    for issue in issues:
        print(format_issue(issue))
    print(f"{len(events)} events, {len(issues)} issues")
    return 1 if has_errors(issues) else 0


def main():
    parser = argparse.ArgumentParser(description="Questly dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="JSON store directory (default: ./data)")
    parser.add_argument("--demo", action="store_true",
                        help="Overwrite the JSON store with the demo story")
    parser.add_argument("--validate", action="store_true",
                        help="Check the story graph and exit")
    args = parser.parse_args()

    data_dir = args.data_dir or Path(os.getenv("DATA_DIR", str(ROOT / "data")))
    if args.demo:
        from questly.demo import create_demo_data
        create_demo_data(data_dir)
        print(f"Demo story written to {data_dir}")

    if args.validate:
        start = os.getenv("QUESTLY_START_EVENT_ID", "start_forest")
        sys.exit(validate(data_dir, start))

    # Build env for the server so it picks up the same data dir
    env = os.environ.copy()
    env["DATA_DIR"] = str(data_dir.resolve())

    print(f"Starting backend on http://localhost:{BACKEND_PORT} ...")
    proc = subprocess.Popen(
        ["uv", "run", "uvicorn", "questly.api.app:app", "--reload", "--host", HOST, "--port", BACKEND_PORT],
        cwd=ROOT, env=env,
    )
    try:
        proc.wait()
    except KeyboardInterrupt:
        print("\nShutting down...")
        proc.terminate()
        proc.wait()


if __name__ == "__main__":
    main()
