"""
Price chart rendering.

Draws simulated price paths, normalised to 100 at the first recorded tick
so that instruments with very different price levels share one axis.
"""
from pathlib import Path
from typing import Optional, Sequence, Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
from loguru import logger  # noqa: E402


class PriceHistoryPlotter:
    """Renders price-history charts from a ``PriceHistoryRecorder`` frame."""

    def __init__(self, style: str = "dark_background"):
        self.style = style

    def plot_paths(
        self,
        history: pd.DataFrame,
        output_file: Union[str, Path],
        asset_ids: Optional[Sequence[str]] = None,
        title: str = "Simulated Price Paths",
    ) -> Optional[Path]:
        """Save a line chart of normalised prices to *output_file*.

        Args:
            history: Wide DataFrame (tick × asset) of prices.
            output_file: Destination PNG path.
            asset_ids: Columns to draw; defaults to every column.
            title: Chart title.

        Returns:
            The written path, or ``None`` when there is nothing to draw.
        """
        columns = list(asset_ids) if asset_ids is not None else list(history.columns)
        columns = [c for c in columns if c in history.columns]
        if history.empty or not columns:
            logger.warning("No price history to plot.")
            return None

        logger.info(f"Plotting {len(columns)} price paths over {len(history)} ticks...")

        df = history[columns].ffill().bfill()
        normalised = df / df.iloc[0] * 100

        with plt.style.context(self.style):
            fig, ax = plt.subplots(figsize=(16, 8))
            colors = plt.cm.tab20.colors

            for i, col in enumerate(normalised.columns):
                ax.plot(
                    normalised.index, normalised[col],
                    label=col, linewidth=1.5, color=colors[i % len(colors)], alpha=0.9,
                )

            ax.axhline(100, color="white", linestyle=":", alpha=0.4)
            ax.set_title(title, fontsize=16, color="white", pad=15)
            ax.set_xlabel("Tick", fontsize=12)
            ax.set_ylabel("Price (first tick = 100)", fontsize=12)
            ax.grid(True, color="#444444", linestyle="-", linewidth=0.5, alpha=0.3)
            ax.legend(
                loc="upper left", bbox_to_anchor=(1, 1), fontsize=9,
                facecolor="#1a1a1a", edgecolor="gray",
            )

            path = Path(output_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(path, dpi=150, bbox_inches="tight")
            plt.close(fig)

        logger.success(f"Price chart saved to {path}")
        return path
