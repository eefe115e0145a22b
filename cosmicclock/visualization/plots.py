import os

import matplotlib.pyplot as plt
import numpy as np

from cosmicclock.config import settings
from cosmicclock.physics.cosmology import scale_factor
from cosmicclock.physics.ephemeris import Body
from cosmicclock.physics.orbits import TRACKED_BODIES


def plot_solar_trails(feed, output_dir=None):
    """
    Top-down view of every trail in the feed (ecliptic plane, scene X/Z).
    """
    output_dir = output_dir or settings.OUTPUT_DIR
    os.makedirs(output_dir, exist_ok=True)

    plt.figure(figsize=(8, 8))
    plt.plot([0.0], [0.0], "o", color="gold", label="Sun")

    colors = {t.body: t.color for t in TRACKED_BODIES}
    colors[Body.MOON] = "#999999"

    for body, trail in feed.trails.items():
        pts = trail.positions()
        if len(pts) == 0:
            continue
        plt.plot(pts[:, 0], pts[:, 2], color=colors.get(body, "k"), lw=1.0, label=body.value)
        plt.plot(pts[-1, 0], pts[-1, 2], "o", color=colors.get(body, "k"), ms=4)

    plt.gca().set_aspect("equal")
    plt.xlabel("x (AU)")
    plt.ylabel("depth (AU)")
    plt.title(f"Heliocentric trails (Moon offset ×{feed.moon_exaggeration:g})")
    plt.legend(fontsize=8)

    save_path = os.path.join(output_dir, "solar_trails.png")
    plt.tight_layout()
    plt.savefig(save_path)
    plt.close()

    print(f"[OK] Saved: {save_path}")
    return save_path


def plot_scale_factor_curve(output_dir=None, marker_age_gyr=None):
    """
    Toy scale factor a(t) across the model's age range, with epoch bands.
    """
    output_dir = output_dir or settings.OUTPUT_DIR
    os.makedirs(output_dir, exist_ok=True)

    ages = np.linspace(0.0, settings.COSMIC_AGE_MAX_GYR, 301)
    a = np.array([scale_factor(t) for t in ages])

    plt.figure(figsize=(10, 5))
    plt.plot(ages, a, color="tab:blue")

    lo = 0.0
    for i, (hi, label) in enumerate(settings.EPOCH_BANDS):
        if i % 2 == 0:
            plt.axvspan(lo, hi, color="grey", alpha=0.12)
        plt.text((lo + hi) / 2.0, 0.02, label, rotation=90, fontsize=7, ha="center", va="bottom")
        lo = hi

    if marker_age_gyr is not None:
        plt.axvline(marker_age_gyr, color="tab:red", ls="--", lw=1.0)
        plt.plot([marker_age_gyr], [scale_factor(marker_age_gyr)], "o", color="tab:red")

    plt.xlabel("Cosmic age (Gyr)")
    plt.ylabel("Scale factor a (illustrative)")
    plt.title("Toy scale factor")
    plt.ylim(0.0, 1.05)

    save_path = os.path.join(output_dir, "scale_factor.png")
    plt.tight_layout()
    plt.savefig(save_path)
    plt.close()

    print(f"[OK] Saved: {save_path}")
    return save_path
