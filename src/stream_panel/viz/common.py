from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt


def save_figure(path: Path, facecolor: str = "white") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    plt.tight_layout()
    plt.savefig(path, facecolor=facecolor)
    plt.close()
    return path
