"""
Performance Benchmark
=====================

Measures engine tick throughput for performance tuning.

A scripted solver keeps the board alive: every ``answer_every`` ticks it types
the answer of the lowest falling item, and with ``sum_chance`` it tries the
sum of every answer instead.

Usage:
    python -m tools.benchmark_speed [--steps S] [--answer-every N] [--quick]
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import List, Optional

import numpy as np

from stack_attack.core.answer_resolver import MatchKind, order_by_proximity
from stack_attack.core.config_loader import load_config, GameConfig
from stack_attack.core.game import StackAttackGame

TICK_MS = 16


def scripted_answer(game: StackAttackGame, rng: np.random.Generator, sum_chance: float) -> Optional[str]:
    """Pick the input a quick player would type, or None if nothing falls."""
    items = game.store.items
    if not items:
        return None
    if len(items) >= 2 and rng.random() < sum_chance:
        return str(sum(item.answer for item in items))
    return str(order_by_proximity(items)[0].answer)


def benchmark_game(
    num_steps: int = 10000,
    answer_every: Optional[int] = 30,
    sum_chance: float = 0.1,
    seed: int = 42,
    config: Optional[GameConfig] = None
) -> dict:
    """
    Benchmark StackAttackGame ticks.

    Args:
        num_steps: Number of ticks.
        answer_every: Ticks between scripted answers. None disables the solver.
        sum_chance: Probability a scripted answer tries the sum-all rule.
        seed: Random seed.
        config: Game configuration. Loaded from disk if None.

    Returns:
        Dict with timing results.
    """
    if config is None:
        config = load_config()
    game = StackAttackGame(config=config, seed=seed)
    rng = np.random.default_rng(seed)

    # Warmup
    game.start()
    for _ in range(100):
        game.step(TICK_MS)

    game.reset(seed=seed)
    games = 1
    answers = 0
    matches = 0
    best_score = 0
    start = time.perf_counter()

    for tick in range(1, num_steps + 1):
        result = game.step(TICK_MS)

        if result.game_over:
            best_score = max(best_score, game.score)
            game.reset()
            games += 1
            continue

        if answer_every and tick % answer_every == 0:
            text = scripted_answer(game, rng, sum_chance)
            if text is not None:
                answers += 1
                if game.submit_input(text).kind in (MatchKind.SINGLE, MatchKind.SUM_ALL):
                    matches += 1

    elapsed = time.perf_counter() - start
    best_score = max(best_score, game.score)
    game.dispose()

    return {
        "mode": "solver" if answer_every else "idle",
        "num_steps": num_steps,
        "games": games,
        "answers": answers,
        "matches": matches,
        "best_score": best_score,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps,
        "sim_speedup": (num_steps * TICK_MS / 1000) / elapsed
    }


def run_all_benchmarks(
    answer_intervals: List[int] = [10, 30, 90],
    steps: int = 10000
) -> list:
    """Run comprehensive benchmarks."""
    results = []

    print("=" * 60)
    print("STACK ATTACK ENGINE PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    print("Benchmarking idle board (no input)...")
    result = benchmark_game(num_steps=steps, answer_every=None)
    results.append(result)
    print(f"  Steps/sec: {result['steps_per_second']:.1f}")
    print(f"  ms/step:   {result['ms_per_step']:.3f}")
    print(f"  Games:     {result['games']}")
    print()

    for interval in answer_intervals:
        print(f"Benchmarking scripted solver (every {interval} ticks)...")
        result = benchmark_game(num_steps=steps, answer_every=interval)
        result["answer_every"] = interval
        results.append(result)
        print(f"  Steps/sec: {result['steps_per_second']:.1f}")
        print(f"  ms/step:   {result['ms_per_step']:.3f}")
        print(f"  Matches:   {result['matches']}/{result['answers']}")
        print(f"  Best:      {result['best_score']}")
        print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print()
    print(f"{'Mode':<12} {'Every':>6} {'Steps/s':>12} {'ms/step':>10} {'x realtime':>11}")
    print("-" * 55)

    for r in results:
        every = r.get("answer_every", "-")
        print(
            f"{r['mode']:<12} {every:>6} {r['steps_per_second']:>12.1f} "
            f"{r['ms_per_step']:>10.3f} {r['sim_speedup']:>11.1f}"
        )

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Stack Attack engine performance")
    parser.add_argument("--steps", type=int, default=10000, help="Ticks per benchmark")
    parser.add_argument("--answer-every", type=int, nargs="+", default=[10, 30, 90],
                        help="Solver intervals (ticks) to test")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer steps)")

    args = parser.parse_args()

    steps = 1000 if args.quick else args.steps

    run_all_benchmarks(
        answer_intervals=args.answer_every,
        steps=steps
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
