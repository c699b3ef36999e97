"""Matplotlib analysis charts — autopilot win rates, session lengths, blocks broken."""

import os
import random

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

from breakout.autopilot import Autopilot, PILOT_STYLES
from breakout.game import simulate_session, _compute_session_stats
from breakout import arena

STYLE_COLORS = {
    "perfect": "#28a745",
    "steady": "#4ecdc4",
    "casual": "#ffc107",
    "sloppy": "#dc3545",
}


def _style_chart(ax, title):
    """Apply dark theme styling to chart."""
    ax.set_facecolor("#0f0f1a")
    ax.set_title(title, color="#e0e0e0", fontsize=13, fontweight="bold", pad=12)
    ax.tick_params(colors="#888888", labelsize=9)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.spines["bottom"].set_color("#333333")
    ax.spines["left"].set_color("#333333")
    ax.xaxis.label.set_color("#aaaaaa")
    ax.yaxis.label.set_color("#aaaaaa")


def run_grid(sessions=10, seed=42, max_time=120.0):
    """Play ``sessions`` headless sessions for every profile x pilot style.

    Returns {(profile, style): [SessionResult, ...]}.
    """
    rng = random.Random(seed)
    results = {}
    for profile_key in arena.list_profiles():
        for style in PILOT_STYLES:
            pilot = Autopilot(style, style, rng=rng)
            results[(profile_key, style)] = [
                simulate_session(pilot, profile_key, max_time=max_time, rng=rng)
                for _ in range(sessions)
            ]
    return results


def chart_win_rate(results, save_path=None):
    """Chart 1: Win rate per pilot style, one bar group per profile."""
    profiles = arena.list_profiles()
    styles = list(PILOT_STYLES.keys())

    fig, ax = plt.subplots(figsize=(8, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "Win Rate by Pilot Style")

    x = np.arange(len(profiles))
    width = 0.8 / len(styles)

    for i, style in enumerate(styles):
        rates = [
            _compute_session_stats(results[(p, style)])["win_rate"] * 100
            for p in profiles
        ]
        bars = ax.bar(
            x + i * width, rates, width,
            color=STYLE_COLORS.get(style, "#888888"),
            label=PILOT_STYLES[style]["label"], alpha=0.85,
        )
        for bar, r in zip(bars, rates):
            ax.text(
                bar.get_x() + bar.get_width() / 2, bar.get_height() + 1,
                f"{r:.0f}", ha="center", va="bottom", fontsize=8, color="#aaa",
            )

    ax.set_xticks(x + width * (len(styles) - 1) / 2)
    ax.set_xticklabels([arena.PROFILES[p]["label"] for p in profiles])
    ax.set_ylabel("Win Rate (%)")
    ax.set_ylim(0, 110)
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=9)
    ax.grid(True, alpha=0.15, axis="y")

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def chart_session_duration(results, profile_key=arena.DEFAULT_PROFILE, save_path=None):
    """Chart 2: Distribution of session durations for one profile."""
    fig, ax = plt.subplots(figsize=(8, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, f"Session Duration ({arena.PROFILES[profile_key]['label']})")

    all_durations = [r.duration for s in PILOT_STYLES for r in results[(profile_key, s)]]
    bins = np.linspace(0, max(all_durations + [1.0]), 16)

    for style in PILOT_STYLES:
        durations = np.array([r.duration for r in results[(profile_key, style)]])
        ax.hist(
            durations, bins=bins, alpha=0.55,
            color=STYLE_COLORS.get(style, "#888888"),
            label=PILOT_STYLES[style]["label"],
        )

    ax.set_xlabel("Duration (s)")
    ax.set_ylabel("Sessions")
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=9)
    ax.grid(True, alpha=0.15)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def chart_blocks_destroyed(results, profile_key=arena.DEFAULT_PROFILE, save_path=None):
    """Chart 3: Blocks broken per session, one box per pilot style."""
    styles = list(PILOT_STYLES.keys())
    data = [
        np.array([r.blocks_destroyed for r in results[(profile_key, s)]])
        for s in styles
    ]

    fig, ax = plt.subplots(figsize=(8, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "Blocks Broken per Session")

    box = ax.boxplot(data, patch_artist=True)
    ax.set_xticks(np.arange(1, len(styles) + 1))
    ax.set_xticklabels([PILOT_STYLES[s]["label"] for s in styles])
    for patch, style in zip(box["boxes"], styles):
        patch.set_facecolor(STYLE_COLORS.get(style, "#888888"))
        patch.set_alpha(0.7)

    total = arena.initial_block_count(arena.PROFILES[profile_key])
    ax.axhline(y=total, color="#e94560", linestyle="--", linewidth=1.5, alpha=0.7)
    ax.text(len(styles) + 0.4, total + 0.3, f"All blocks ({total})", color="#e94560", fontsize=9, ha="right")

    ax.set_ylabel("Blocks")
    ax.set_ylim(0, total + 2)
    ax.grid(True, alpha=0.15, axis="y")

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def generate_all_charts(output_dir="output", sessions=10, seed=42):
    """Run the autopilot grid and save every chart. Returns the file paths."""
    os.makedirs(output_dir, exist_ok=True)
    results = run_grid(sessions=sessions, seed=seed)

    charts = [
        ("win_rate.png", chart_win_rate),
        ("session_duration.png", chart_session_duration),
        ("blocks_destroyed.png", chart_blocks_destroyed),
    ]
    paths = []
    for filename, fn in charts:
        path = os.path.join(output_dir, filename)
        fig = fn(results, save_path=path)
        plt.close(fig)
        paths.append(path)
        print(f"  Saved {path}")

    return paths
