#!/usr/bin/env python3
"""
Compare citation metrics between two evaluation runs (e.g., two corpus
builds, or local retrieval vs. the deployed API).

Usage:
    python -m evals.compare_results results_before.json results_after.json
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict


def load_results(filepath: str) -> Dict[str, Any]:
    """Load evaluation results from JSON file."""
    with open(filepath, "r", encoding="utf-8") as f:
        return json.load(f)


def calculate_improvement(before: float, after: float) -> Dict[str, Any]:
    """
    Returns:
    - absolute_diff: after - before
    - relative_improvement: (after - before) / before * 100
    - better: whether the second run is better
    """
    abs_diff = after - before
    if before != 0:
        rel_improvement = (abs_diff / before) * 100
    else:
        rel_improvement = float("inf") if abs_diff > 0 else 0.0

    return {
        "absolute_diff": abs_diff,
        "relative_improvement": rel_improvement,
        "better": abs_diff > 0,
    }


def compare_metrics(before_results: Dict, after_results: Dict) -> Dict[str, Any]:
    comparison: Dict[str, Any] = {"citation_metrics": {}}

    before = before_results.get("citation_metrics", {})
    after = after_results.get("citation_metrics", {})
    for metric in before:
        if isinstance(before[metric], (int, float)) and isinstance(
            after.get(metric), (int, float)
        ):
            comparison["citation_metrics"][metric] = {
                "before": before[metric],
                "after": after[metric],
                **calculate_improvement(before[metric], after[metric]),
            }
    return comparison


def print_comparison(comparison: Dict[str, Any], before_file: str, after_file: str):
    print("\n" + "=" * 80)
    print("EVALUATION COMPARISON")
    print("=" * 80)
    print(f"\nBefore: {before_file}")
    print(f"After:  {after_file}")

    metrics = comparison["citation_metrics"]
    if metrics:
        print("\n" + "-" * 80)
        print(
            f"{'Metric':<30} {'Before':>10} {'After':>10} {'Δ Abs':>10} {'Δ %':>10} {'Better':>8}"
        )
        print("-" * 80)
        for metric, values in metrics.items():
            better = "✓" if values["better"] else "✗"
            print(
                f"{metric:<30} {values['before']:>10.4f} {values['after']:>10.4f} "
                f"{values['absolute_diff']:>+10.4f} {values['relative_improvement']:>+9.2f}% {better:>8}"
            )

        improvements = sum(1 for v in metrics.values() if v["better"])
        print("\n" + "=" * 80)
        print(
            f"Citation metrics improved: {improvements}/{len(metrics)} "
            f"({improvements/len(metrics)*100:.1f}%)"
        )
    print("=" * 80)


def main():
    parser = argparse.ArgumentParser(description="Compare two evaluation result files")
    parser.add_argument("before", type=str, help="Path to the first results JSON file")
    parser.add_argument("after", type=str, help="Path to the second results JSON file")
    parser.add_argument("--output", type=str, help="Path to save comparison JSON (optional)")
    args = parser.parse_args()

    try:
        before_results = load_results(args.before)
        after_results = load_results(args.after)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Error parsing JSON: {e}", file=sys.stderr)
        sys.exit(1)

    comparison = compare_metrics(before_results, after_results)
    print_comparison(comparison, args.before, args.after)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(comparison, f, indent=2, default=str)
        print(f"\nComparison saved to {args.output}")


if __name__ == "__main__":
    main()
