#!/usr/bin/env python3
"""CLI entry point for the Breakout game.

Usage:
    python main.py play [profile]                 Play in a Pygame window
    python main.py autoplay [style] [profile]     Run autopilot sessions and print stats
    python main.py analyze                        Generate autopilot comparison charts
    python main.py test                           Run all tests

Add -v anywhere to turn on debug logging.
"""

import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from breakout.logging_config import setup_logging


def _args() -> list[str]:
    return [a for a in sys.argv[2:] if a != "-v"]


def _profile_arg(args: list[str], index: int) -> str:
    from breakout import arena
    if len(args) > index and args[index] in arena.PROFILES:
        return args[index]
    return arena.DEFAULT_PROFILE


def cmd_play():
    """Play a session in a Pygame window."""
    profile = _profile_arg(_args(), 0)
    print(f"Launching Breakout ({profile})...")
    print("Controls: click to start, drag the paddle, Q/ESC=quit")
    print("-" * 60)
    from breakout_sim.visualizer import run_visualizer
    run_visualizer(profile)


def cmd_autoplay():
    """Run autopilot sessions in text mode and print stats."""
    import random
    from breakout.autopilot import Autopilot, PILOT_STYLES
    from breakout.game import simulate_session, _compute_session_stats

    args = _args()
    styles = list(PILOT_STYLES.keys())
    style = args[0] if len(args) > 0 and args[0] in styles else "steady"
    profile = _profile_arg(args, 1)

    print("=" * 60)
    print("  BREAKOUT AUTOPILOT")
    print("=" * 60)

    rng = random.Random(42)
    pilot = Autopilot("Pilot", style, rng=rng)
    print(f"\n  Pilot: {pilot.label} (lag:{pilot.reaction:.2f}s "
          f"speed:{pilot.max_speed:.0f} jitter:{pilot.jitter:.0f})")
    print(f"  Profile: {profile}\n")

    results = []
    for i in range(10):
        r = simulate_session(pilot, profile, max_time=180.0, rng=rng)
        results.append(r)
        outcome = "timeout" if r.timed_out else ("WON" if r.won else "lost")
        print(f"  Session {i+1:2d}: {outcome:7s} {r.duration:6.1f}s  "
              f"blocks:{r.blocks_destroyed:2d}  paddle hits:{r.paddle_hits}")

    s = _compute_session_stats(results)
    print()
    print(f"  Wins: {s['wins']}  Losses: {s['losses']}  Timeouts: {s['timeouts']}")
    print(f"  Win rate: {s['win_rate']:.0%}")
    print(f"  Avg duration: {s['avg_duration']}s  (max {s['max_duration']}s)")
    print(f"  Avg blocks broken: {s['avg_blocks_destroyed']}")
    print()
    print("  Available styles: " + ", ".join(styles))
    print("  Usage: python main.py autoplay [style] [profile]")
    print("=" * 60)


def cmd_analyze():
    """Generate all analysis charts."""
    print("Generating analysis charts...")
    print("-" * 60)
    from breakout_sim.analysis import generate_all_charts
    output_dir = os.path.join(os.path.dirname(__file__), "output")
    paths = generate_all_charts(output_dir=output_dir)
    print(f"\nDone! {len(paths)} charts saved to {output_dir}/")


def cmd_test():
    """Run all tests."""
    import subprocess
    print("Running tests...")
    print("-" * 60)
    result = subprocess.run(
        [sys.executable, "-m", "pytest", "tests/", "-v"],
        cwd=os.path.dirname(os.path.abspath(__file__)),
    )
    sys.exit(result.returncode)


COMMANDS = {
    "play": cmd_play,
    "autoplay": cmd_autoplay,
    "analyze": cmd_analyze,
    "test": cmd_test,
}


def main():
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print(__doc__)
        print("Available commands:")
        for name, func in COMMANDS.items():
            print(f"  {name:12s} {func.__doc__}")
        sys.exit(1)

    setup_logging(logging.DEBUG if "-v" in sys.argv else logging.WARNING)
    COMMANDS[sys.argv[1]]()


if __name__ == "__main__":
    main()
