#!/usr/bin/env python3
"""
Spin audit: headless simulation of the Wonder Wheel.

Spins the wheel many times with a seeded RNG, checks that every stop lands
the selected wedge under the pointer and that rotation never goes
backwards, and writes per-wedge frequencies to CSV.

Usage:
    python -m scripts.spin_audit --rounds 100000 --seed AUDIT_2026 --out out/spin_audit.csv
"""
import argparse
import csv
import hashlib
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lessongames.config_hash import get_config_hash
from lessongames.logic.rng import SeededRNG
from lessongames.logic.spin import SpinEngine, segment_degrees, wedge_under_pointer
from lessongames.logic.wedges import WedgeTable


@dataclass
class AuditStats:
    """Statistics accumulated during the audit."""
    rounds: int = 0
    landing_mismatches: int = 0
    backward_moves: int = 0
    wedge_counts: list[int] = field(default_factory=list)
    max_abs_jitter: float = 0.0
    min_advance_degrees: float = float("inf")
    max_advance_degrees: float = 0.0
    final_rotation: float = 0.0


def seed_to_int(seed_str: str) -> int:
    """Convert string seed to integer deterministically."""
    return int(hashlib.sha256(seed_str.encode()).hexdigest(), 16) % (2**31)


def get_timestamp_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def run_audit(rounds: int, seed_str: str, verbose: bool = False) -> AuditStats:
    """Run `rounds` spins back to back from rotation 0."""
    table = WedgeTable()
    engine = SpinEngine(rng=SeededRNG(seed_to_int(seed_str)), table=table)
    n = len(table)
    stats = AuditStats(wedge_counts=[0] * n)

    rotation = 0.0
    for i in range(rounds):
        plan = engine.plan_spin(rotation)
        advance = plan.target_rotation - rotation

        if wedge_under_pointer(plan.target_rotation, n) != plan.index:
            stats.landing_mismatches += 1
        if advance < 0:
            stats.backward_moves += 1

        stats.wedge_counts[plan.index] += 1
        stats.max_abs_jitter = max(stats.max_abs_jitter, abs(plan.jitter))
        stats.min_advance_degrees = min(stats.min_advance_degrees, advance)
        stats.max_advance_degrees = max(stats.max_advance_degrees, advance)
        stats.rounds += 1
        rotation = plan.target_rotation

        if verbose and (i + 1) % 10000 == 0:
            print(f"  {i + 1}/{rounds} spins")

    stats.final_rotation = rotation
    return stats


def generate_csv(rounds: int, seed_str: str, stats: AuditStats, output_path: str) -> None:
    """One summary row plus a frequency column per wedge."""
    table = WedgeTable()
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    row = {
        "config_hash": get_config_hash(),
        "timestamp": get_timestamp_iso(),
        "seed": seed_str,
        "rounds": rounds,
        "landing_mismatches": stats.landing_mismatches,
        "backward_moves": stats.backward_moves,
        "max_abs_jitter": f"{stats.max_abs_jitter:.6f}",
        "jitter_limit": f"{segment_degrees(len(table)) / 2:.6f}",
        "min_advance_degrees": f"{stats.min_advance_degrees:.6f}",
        "max_advance_degrees": f"{stats.max_advance_degrees:.6f}",
    }
    for wedge, count in zip(table, stats.wedge_counts):
        row[f"freq_{wedge.label}"] = f"{count / stats.rounds:.6f}" if stats.rounds else "0"

    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(row.keys()))
        writer.writeheader()
        writer.writerow(row)


def main() -> int:
    parser = argparse.ArgumentParser(description="Wonder Wheel spin audit")
    parser.add_argument("--rounds", type=int, default=100000)
    parser.add_argument("--seed", type=str, default="AUDIT_2026")
    parser.add_argument("--out", type=str, default="out/spin_audit.csv")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    print(f"Spin audit: {args.rounds} rounds, seed={args.seed}, config_hash={get_config_hash()}")
    stats = run_audit(rounds=args.rounds, seed_str=args.seed, verbose=args.verbose)
    generate_csv(rounds=args.rounds, seed_str=args.seed, stats=stats, output_path=args.out)

    table = WedgeTable()
    print("\nWedge frequencies:")
    for wedge, count in zip(table, stats.wedge_counts):
        print(f"  {wedge.label:<12} {count / stats.rounds:.4%}")

    if stats.landing_mismatches or stats.backward_moves:
        print(
            f"\nASSERTION FAILED: {stats.landing_mismatches} landing mismatches, "
            f"{stats.backward_moves} backward moves"
        )
        return 1

    print(f"\nASSERTION PASSED: every stop landed on its wedge; max |jitter| {stats.max_abs_jitter:.3f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
