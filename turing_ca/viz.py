"""
viz.py

Offline images of colour maps: PNG snapshots, montages, a panel figure of a
run's saved states and GIF animations. Nothing here opens a window.
"""

import glob
import os
from typing import List, Optional, Sequence

import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from PIL import Image

from turing_ca.storage import load_state_npz


def color_to_rgb(color_map: np.ndarray, cmap: str = "viridis") -> np.ndarray:
    """Map colour values in [0, 1] to uint8 RGB through a matplotlib colormap."""
    colormap = matplotlib.colormaps[cmap]
    rgba = colormap(np.clip(color_map, 0.0, 1.0))
    return (255.0 * rgba[..., :3]).round().astype(np.uint8)


def save_color_png(path: str, color_map: np.ndarray, cmap: str = "viridis") -> str:
    Image.fromarray(color_to_rgb(color_map, cmap)).save(path)
    return path


def montage(images: Sequence[str], outpath: str, max_images: int = 9, cols: int = 3) -> Optional[str]:
    """
    Make a simple montage from a list of image paths.
    """
    if not images:
        return None
    images = list(images)[:max_images]
    imgs = [Image.open(im) for im in images]
    w, h = imgs[0].size
    cols = min(cols, len(imgs))
    rows = (len(imgs) + cols - 1) // cols
    canvas = Image.new("RGB", (cols * w, rows * h))
    for idx, im in enumerate(imgs):
        canvas.paste(im, ((idx % cols) * w, (idx // cols) * h))
    canvas.save(outpath)
    return outpath


def save_gif(frames: List[np.ndarray], path: str, duration_ms: int = 80, cmap: str = "viridis") -> Optional[str]:
    """Write colour-map frames as a looping GIF."""
    if not frames:
        return None
    imgs = [Image.fromarray(color_to_rgb(f, cmap)) for f in frames]
    imgs[0].save(path, save_all=True, append_images=imgs[1:], loop=0, duration=duration_ms)
    return path


def plot_snapshots(run_dir: str, outpath: Optional[str] = None, cmap: str = "viridis", max_panels: int = 6) -> Optional[str]:
    """Panel figure of the colour maps in a run's state_*.npz files."""
    paths = sorted(glob.glob(os.path.join(run_dir, "state_*.npz")))
    if not paths:
        return None
    states = [load_state_npz(p) for p in paths]
    states.sort(key=lambda s: s[2])
    states = states[-max_panels:]

    fig, axes = plt.subplots(1, len(states), figsize=(3 * len(states), 3), squeeze=False)
    for ax, (_, color_map, gen) in zip(axes[0], states):
        ax.imshow(color_map, cmap=cmap, vmin=0.0, vmax=1.0, origin="upper")
        ax.set_title(f"gen {gen}")
        ax.axis("off")
    plt.tight_layout()

    outpath = outpath or os.path.join(run_dir, "snapshots.png")
    fig.savefig(outpath, dpi=100)
    plt.close(fig)
    return outpath
