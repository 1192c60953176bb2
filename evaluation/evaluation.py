#!/usr/bin/env python3
"""
Evaluation runner for the Huffman text codec.

This evaluation script:
- Runs the pytest suite in tests/ and collects per-test outcomes
- Compresses a handful of sample texts and records size, ratio and timing
- Writes a JSON report with environment metadata

Run with:
    python evaluation/evaluation.py [--output report.json]
"""
import os
import sys
import json
import uuid
import time
import platform
import subprocess
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from huffman_service import HuffmanService  # noqa: E402


SAMPLE_TEXTS = {
    "english": (
        "It was the best of times, it was the worst of times, it was the age of "
        "wisdom, it was the age of foolishness, it was the epoch of belief, it was "
        "the epoch of incredulity, it was the season of Light, it was the season of "
        "Darkness, it was the spring of hope, it was the winter of despair."
    ) * 20,
    "log_lines": "".join(
        f"2024-01-{day:02d} 12:00:{sec:02d} INFO request handled status=200 path=/api/v1/items\n"
        for day in range(1, 29) for sec in range(0, 60, 7)
    ),
    "single_symbol": "z" * 4096,
    "multilingual": "Grüße, 世界! Привет, мир! 🌍 " * 50,
}


def generate_run_id():
    """Generate a short unique run ID."""
    return uuid.uuid4().hex[:8]


def get_git_info():
    """Get git commit and branch information."""
    git_info = {"git_commit": "unknown", "git_branch": "unknown"}
    commands = {
        "git_commit": ["git", "rev-parse", "HEAD"],
        "git_branch": ["git", "rev-parse", "--abbrev-ref", "HEAD"],
    }
    for key, cmd in commands.items():
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=5, cwd=str(PROJECT_ROOT))
        except (OSError, subprocess.TimeoutExpired):
            continue
        if result.returncode == 0:
            value = result.stdout.strip()
            git_info[key] = value[:8] if key == "git_commit" else value
    return git_info


def get_environment_info():
    """Collect environment information for the report."""
    git_info = get_git_info()

    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "os": platform.system(),
        "os_release": platform.release(),
        "architecture": platform.machine(),
        "hostname": platform.node(),
        "git_commit": git_info["git_commit"],
        "git_branch": git_info["git_branch"],
    }


def parse_pytest_verbose_output(output):
    """Parse pytest verbose output to extract test results."""
    tests = []
    outcomes = {
        " PASSED": "passed",
        " FAILED": "failed",
        " ERROR": "error",
        " SKIPPED": "skipped",
    }

    for line in output.split('\n'):
        line_stripped = line.strip()

        # Match lines like: tests/test_bit_stream.py::test_reverse PASSED
        if '::' not in line_stripped:
            continue
        for status_word, outcome in outcomes.items():
            if status_word in line_stripped:
                nodeid = line_stripped.split(status_word)[0].strip()
                tests.append({
                    "nodeid": nodeid,
                    "name": nodeid.split("::")[-1],
                    "outcome": outcome,
                })
                break

    return tests


def run_pytest(tests_dir, timeout=300):
    """
    Run pytest on the tests/ folder.

    Returns:
        dict with test results
    """
    print(f"\n{'=' * 60}")
    print("RUNNING TESTS")
    print(f"{'=' * 60}")
    print(f"Tests directory: {tests_dir}")

    cmd = [sys.executable, "-m", "pytest", str(tests_dir), "-v", "--tb=short"]

    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(PROJECT_ROOT), env.get("PYTHONPATH")]))

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
            env=env,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        print("❌ Test execution timed out")
        return {
            "success": False,
            "exit_code": -1,
            "tests": [],
            "summary": {"error": "Test execution timed out"},
            "stdout": "",
            "stderr": "",
        }

    stdout = result.stdout
    stderr = result.stderr
    tests = parse_pytest_verbose_output(stdout)

    summary = {"total": len(tests)}
    for outcome in ("passed", "failed", "error", "skipped"):
        summary[outcome] = sum(1 for t in tests if t["outcome"] == outcome)

    print(f"\nResults: {summary['passed']} passed, {summary['failed']} failed, "
          f"{summary['error']} errors, {summary['skipped']} skipped (total: {summary['total']})")

    for test in tests:
        status_icon = {
            "passed": "✅",
            "failed": "❌",
            "error": "💥",
            "skipped": "⏭️"
        }.get(test["outcome"], "❓")
        print(f"  {status_icon} {test['nodeid']}: {test['outcome']}")

    return {
        "success": result.returncode == 0,
        "exit_code": result.returncode,
        "tests": tests,
        "summary": summary,
        "stdout": stdout[-3000:],
        "stderr": stderr[-1000:],
    }


def measure_compression(samples):
    """Compress each sample, check it decodes back, and record sizes and timings."""
    print(f"\n{'=' * 60}")
    print("COMPRESSION SAMPLES")
    print(f"{'=' * 60}")

    svc = HuffmanService()
    rows = []
    for name, text in samples.items():
        t0 = time.perf_counter()
        compressed = svc.compress(text)
        t1 = time.perf_counter()
        restored = svc.decompress(compressed)
        t2 = time.perf_counter()

        stats = svc.stats(text)
        row = {
            "sample": name,
            "original_bytes": stats.original_bytes,
            "compressed_bytes": stats.compressed_bytes,
            "unique_symbols": stats.unique_symbols,
            "written_bits": stats.written_bits,
            "compression_ratio": stats.compression_ratio,
            "space_saved_percent": stats.space_saved_percent,
            "roundtrip_ok": restored == text,
            "time_compress": round(t1 - t0, 6),
            "time_decompress": round(t2 - t1, 6),
        }
        rows.append(row)

        ratio = f"{row['compression_ratio']:.3f}" if row["compression_ratio"] is not None else "n/a"
        status_icon = "✅" if row["roundtrip_ok"] else "❌"
        print(f"  {status_icon} {name}: {row['original_bytes']} -> {row['compressed_bytes']} bytes (ratio {ratio})")

    return rows


def run_evaluation():
    """
    Run the test suite and the compression samples.

    Returns dict with both result sets.
    """
    print(f"\n{'=' * 60}")
    print("HUFFMAN TEXT CODEC EVALUATION")
    print(f"{'=' * 60}")

    test_results = run_pytest(PROJECT_ROOT / "tests")
    samples = measure_compression(SAMPLE_TEXTS)

    print(f"\n{'=' * 60}")
    print("EVALUATION SUMMARY")
    print(f"{'=' * 60}")
    print(f"  Tests: {'✅ PASSED' if test_results.get('success') else '❌ FAILED'}")
    print(f"  Round trips: {sum(r['roundtrip_ok'] for r in samples)}/{len(samples)} ok")

    return {
        "tests": test_results,
        "samples": samples,
    }


def generate_output_path():
    """Generate output path in format: evaluation/YYYY-MM-DD/HH-MM-SS/report.json"""
    now = datetime.now()
    output_dir = PROJECT_ROOT / "evaluation" / now.strftime("%Y-%m-%d") / now.strftime("%H-%M-%S")
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir / "report.json"


def main():
    """Main entry point for evaluation."""
    import argparse

    parser = argparse.ArgumentParser(description="Run the Huffman text codec evaluation")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output JSON file path (default: evaluation/YYYY-MM-DD/HH-MM-SS/report.json)"
    )
    args = parser.parse_args()

    run_id = generate_run_id()
    started_at = datetime.now()

    print(f"Run ID: {run_id}")
    print(f"Started at: {started_at.isoformat()}")

    results = run_evaluation()
    success = results["tests"].get("success", False) and all(r["roundtrip_ok"] for r in results["samples"])

    finished_at = datetime.now()
    duration = (finished_at - started_at).total_seconds()

    report = {
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "finished_at": finished_at.isoformat(),
        "duration_seconds": round(duration, 6),
        "success": success,
        "environment": get_environment_info(),
        "results": results,
    }

    output_path = Path(args.output) if args.output else generate_output_path()
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)
    print(f"\n✅ Report saved to: {output_path}")

    print(f"\n{'=' * 60}")
    print("EVALUATION COMPLETE")
    print(f"{'=' * 60}")
    print(f"Run ID: {run_id}")
    print(f"Duration: {duration:.2f}s")
    print(f"Success: {'✅ YES' if success else '❌ NO'}")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
