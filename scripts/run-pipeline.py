#!/usr/bin/env python3
"""Run the design token pipeline end-to-end or by individual phases."""

import argparse
import subprocess
import sys
import time
from pathlib import Path


# All phases in execution order
ALL_PHASES = ["collect", "extract"]

# Files written inside the project output directory
STYLES_FILE = "styles.css"
TOKENS_FILE = "tokens.css"
EXPORT_FILE = "tokens.json"


def run_script(cmd, label=None, timeout=600):
    """Run a script as a subprocess, returning (success, duration, stdout, stderr)."""
    label = label or cmd[0]
    start = time.time()
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        duration = time.time() - start
        success = result.returncode == 0
        if not success:
            print(f"  [{label}] FAILED (exit {result.returncode})")
            # The scripts report their own errors on stdout
            for line in (result.stderr or result.stdout).strip().splitlines()[-10:]:
                print(f"    {line}")
        return success, duration, result.stdout, result.stderr
    except subprocess.TimeoutExpired:
        duration = time.time() - start
        print(f"  [{label}] TIMEOUT after {duration:.0f}s")
        return False, duration, "", f"Timeout after {timeout}s"
    except FileNotFoundError:
        duration = time.time() - start
        print(f"  [{label}] ERROR: script not found: {cmd[0]}")
        return False, duration, "", f"Script not found: {cmd[0]}"


def find_scripts_dir():
    """Locate the scripts/ directory relative to this file."""
    this_dir = Path(__file__).resolve().parent
    if this_dir.name == "scripts":
        return this_dir
    scripts_dir = this_dir.parent / "scripts"
    if scripts_dir.is_dir():
        return scripts_dir
    return this_dir


def collect_command(url, output_dir, scripts_dir, render=False):
    cmd = [
        sys.executable,
        str(scripts_dir / "collect-styles.py"),
        "--url", url,
        "--output", str(Path(output_dir) / STYLES_FILE),
    ]
    if render:
        cmd.append("--render")
    return cmd


def extract_command(url, output_dir, scripts_dir, config=None):
    output = Path(output_dir)
    cmd = [
        sys.executable,
        str(scripts_dir / "extract-design-tokens.py"),
        "--css", str(output / STYLES_FILE),
        "--output", str(output / TOKENS_FILE),
        "--json", str(output / EXPORT_FILE),
        "--source", url,
    ]
    if config:
        cmd.extend(["--config", str(config)])
    return cmd


def phase_collect(url, output_dir, scripts_dir, render=False):
    """Phase 1: Fetch the page and aggregate its style text."""
    print("\n--- Phase 1: Collect Styles ---")
    cmd = collect_command(url, output_dir, scripts_dir, render=render)
    success, duration, stdout, stderr = run_script(cmd, "collect-styles")
    if success:
        print(f"  Collection complete ({duration:.1f}s)")
    return success, duration


def phase_extract(url, output_dir, scripts_dir, config=None):
    """Phase 2: Extract, rank and serialize design tokens."""
    print("\n--- Phase 2: Extract Design Tokens ---")
    styles_path = Path(output_dir) / STYLES_FILE
    if not styles_path.exists():
        print(f"  {STYLES_FILE} not found -- run the collect phase first")
        return False, 0.0

    cmd = extract_command(url, output_dir, scripts_dir, config=config)
    success, duration, stdout, stderr = run_script(cmd, "extract-design-tokens")
    if success:
        print(f"  Extraction complete ({duration:.1f}s)")
        print(f"  Tokens: {Path(output_dir) / TOKENS_FILE}")
    return success, duration


def parse_phases(value):
    """Return the requested phases in execution order, or raise ValueError."""
    if not value:
        return list(ALL_PHASES)
    requested = [p.strip().lower() for p in value.split(",") if p.strip()]
    for p in requested:
        if p not in ALL_PHASES:
            raise ValueError(f"Unknown phase '{p}'. Valid phases: {', '.join(ALL_PHASES)}")
    return [p for p in ALL_PHASES if p in requested]


def print_summary(phase_results, total_start):
    """Print the final pipeline summary dashboard."""
    total_duration = time.time() - total_start

    print("\n")
    print("=" * 40)
    print("  Pipeline Summary")
    print("=" * 40)
    print(f"  {'Phase':<14} {'Status':<12} {'Duration'}")
    print("  " + "-" * 36)

    for phase_id in ALL_PHASES:
        if phase_id in phase_results:
            success, duration = phase_results[phase_id]
            status_icon, status = ("+", "Done") if success else ("X", "Failed")
            dur_str = f"{duration:.1f}s" if duration > 0 else "--"
            print(f"  {phase_id:<14} {status_icon} {status:<9} {dur_str}")
        else:
            print(f"  {phase_id:<14} - Skip      --")

    print("  " + "-" * 36)
    print(f"  Total: {total_duration:.1f}s")
    print("=" * 40)


def main():
    parser = argparse.ArgumentParser(
        description="Run the design token pipeline (collect, extract) end-to-end or by phase."
    )
    parser.add_argument(
        "--url", required=True,
        help="Page URL to extract design tokens from"
    )
    parser.add_argument(
        "--output", required=True,
        help="Project output directory (will be created if it does not exist)"
    )
    parser.add_argument(
        "--phases",
        help="Comma-separated list of phases to run (default: all). Values: collect,extract"
    )
    parser.add_argument(
        "--render", action="store_true",
        help="Render the page with Playwright during collection"
    )
    parser.add_argument(
        "--config",
        help="Extraction config JSON passed through to extract-design-tokens.py"
    )
    args = parser.parse_args()

    try:
        phases = parse_phases(args.phases)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)
    print(f"Project directory: {output_dir.resolve()}")

    scripts_dir = find_scripts_dir()
    print(f"Scripts directory: {scripts_dir}")

    total_start = time.time()
    phase_results = {}

    phase_runners = {
        "collect": lambda: phase_collect(args.url, output_dir, scripts_dir, render=args.render),
        "extract": lambda: phase_extract(args.url, output_dir, scripts_dir, config=args.config),
    }

    for phase_id in phases:
        if phase_id == "extract" and phase_results.get("collect", (True,))[0] is False:
            print(f"\n--- Skipping {phase_id}: collect phase failed ---")
            continue
        phase_results[phase_id] = phase_runners[phase_id]()

    print_summary(phase_results, total_start)

    if not all(success for success, _ in phase_results.values()):
        sys.exit(1)


if __name__ == "__main__":
    main()
