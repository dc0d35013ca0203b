#!/usr/bin/env python3
"""Benchmark layout generators and full blueprint composition."""

from __future__ import annotations

import argparse
import json
import time
from pathlib import Path

from cryptforge.environment.generators.layouts import generate_layout
from cryptforge.environment.generators.pipeline import (
    BLUEPRINT_NAMES,
    LayeredCompositor,
    create_blueprint,
)

GRID_SIZES: tuple[tuple[int, int], ...] = (
    (32, 32),
    (64, 48),
    (100, 80),
    (150, 150),
    (200, 200),
)

ALGORITHMS: tuple[str, ...] = ("bsp", "cellular_automata", "drunkard_walk", "arena")


class GenerationBenchmark:
    """Benchmark runner for layouts and compositions."""

    def __init__(self, iterations: int, compose: bool) -> None:
        self.iterations = iterations
        self.compose = compose
        self.compositor = LayeredCompositor()
        self.results: dict[str, dict[str, float]] = {}

    def _time_layout(self, algorithm: str, width: int, height: int) -> float:
        """Average layout generation time in milliseconds."""
        elapsed_total = 0.0
        for i in range(self.iterations):
            seed = (width * 1_000_000) + (height * 1_000) + i
            start = time.perf_counter()
            generate_layout(algorithm, width, height, seed)
            elapsed_total += time.perf_counter() - start
        return (elapsed_total / self.iterations) * 1000.0

    def _time_blueprint(self, name: str, width: int, height: int) -> float:
        """Average composition time in milliseconds."""
        elapsed_total = 0.0
        for i in range(self.iterations):
            blueprint = create_blueprint(name, width, height, seed=i)
            start = time.perf_counter()
            self.compositor.compose(blueprint)
            elapsed_total += time.perf_counter() - start
        return (elapsed_total / self.iterations) * 1000.0

    def run(self) -> None:
        """Run every configured case."""
        names = ALGORITHMS + (BLUEPRINT_NAMES if self.compose else ())
        print("Generation Benchmark")
        print("=" * 72)
        print(f"Iterations per case: {self.iterations}")
        print()
        print(f"{'Size':>10} " + " ".join(f"{name[:12]:>12}" for name in names))
        print("-" * 72)

        for width, height in GRID_SIZES:
            size_key = f"{width}x{height}"
            timings: dict[str, float] = {}
            for algorithm in ALGORITHMS:
                timings[algorithm] = self._time_layout(algorithm, width, height)
            if self.compose:
                for name in BLUEPRINT_NAMES:
                    timings[name] = self._time_blueprint(name, width, height)
            self.results[size_key] = timings
            row = " ".join(f"{timings[name]:12.2f}" for name in names)
            print(f"{size_key:>10} {row}")

    def save_results(self, filename: str) -> None:
        """Save benchmark output to a JSON file."""
        with Path(filename).open("w") as f:
            json.dump(self.results, f, indent=2)
        print(f"\nSaved benchmark results to {filename}")

    def compare_with_baseline(self, baseline_file: str) -> None:
        """Compare current run with a saved baseline JSON file."""
        try:
            with Path(baseline_file).open() as f:
                baseline: dict[str, dict[str, float]] = json.load(f)
        except FileNotFoundError:
            print(f"\nBaseline file not found: {baseline_file}")
            return

        print(f"\nComparison vs baseline: {baseline_file}")
        print("=" * 72)

        for size_key, current in self.results.items():
            if size_key not in baseline:
                continue
            for name, new_ms in current.items():
                old_ms = baseline[size_key].get(name, 0.0)
                if old_ms <= 0:
                    continue
                delta_pct = ((new_ms - old_ms) / old_ms) * 100.0
                speed_ratio = old_ms / new_ms if new_ms > 0 else 0.0
                trend = "faster" if speed_ratio > 1.0 else "slower"
                print(
                    f"{size_key:>10} {name:>18}: {new_ms:8.2f}ms "
                    f"vs {old_ms:8.2f}ms | {speed_ratio:5.2f}x {trend} "
                    f"({delta_pct:+6.1f}%)"
                )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Benchmark level generation")
    parser.add_argument(
        "--iterations",
        type=int,
        default=5,
        help="Number of runs per case (default: 5)",
    )
    parser.add_argument(
        "--compose",
        action="store_true",
        help="Also time full composition of every named blueprint",
    )
    parser.add_argument("--save", type=str, help="Save current results to JSON")
    parser.add_argument(
        "--compare",
        type=str,
        help="Compare current results against baseline JSON",
    )
    args = parser.parse_args(argv)

    benchmark = GenerationBenchmark(iterations=args.iterations, compose=args.compose)
    benchmark.run()

    if args.save:
        benchmark.save_results(args.save)

    if args.compare:
        benchmark.compare_with_baseline(args.compare)


if __name__ == "__main__":
    main()
