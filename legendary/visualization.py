"""Plots for the legendary classifier report."""
import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

logger = logging.getLogger(__name__)

STYLE = "seaborn-v0_8-whitegrid"


def _is_empty(obj) -> bool:
    return obj is None or getattr(obj, "empty", len(obj) == 0)


def _save(fig, out_file: Path) -> Path:
    import matplotlib.pyplot as plt

    out_file = Path(out_file)
    out_file.parent.mkdir(exist_ok=True, parents=True)
    fig.tight_layout(pad=2)
    fig.savefig(out_file)
    fig.savefig(out_file.with_suffix(".svg"))
    plt.close(fig)
    logger.info("Saved figure to %s", out_file)
    return out_file


def plot_class_balance(y: pd.Series, out_file: Path) -> Optional[Path]:
    """Bar plot of legendary versus non-legendary counts."""
    if _is_empty(y):
        logger.info("No labels to plot class balance")
        return None
    import matplotlib.pyplot as plt

    plt.style.use(STYLE)
    counts = pd.Series(y).value_counts().reindex([0, 1], fill_value=0)
    fig, ax = plt.subplots(figsize=(5, 4))
    ax.bar(["not legendary", "legendary"], counts.values, color=["#348ABD", "#E24A33"])
    for i, v in enumerate(counts.values):
        ax.text(i, v, str(v), ha="center", va="bottom")
    ax.set_ylabel("Pokemon")
    ax.set_title("Class balance", fontweight="bold")
    ax.grid(True, axis="y", linestyle="--", alpha=0.6)
    return _save(fig, out_file)


def plot_missing_values(report: pd.DataFrame, out_file: Path) -> Optional[Path]:
    """Horizontal bars with the missing fraction per column."""
    if _is_empty(report):
        logger.info("No missing values to plot")
        return None
    import matplotlib.pyplot as plt

    plt.style.use(STYLE)
    fig, ax = plt.subplots(figsize=(7, max(3, 0.4 * len(report))))
    ax.barh(report.index.astype(str), report["fraction"], color="#348ABD")
    ax.invert_yaxis()
    ax.set_xlabel("Fraction missing")
    ax.set_title("Missing values before imputation", fontweight="bold")
    ax.grid(True, axis="x", linestyle="--", alpha=0.6)
    return _save(fig, out_file)


def plot_confusion_matrix(cm_df: pd.DataFrame, out_file: Path) -> Optional[Path]:
    """Annotated heatmap of a confusion table."""
    if _is_empty(cm_df):
        logger.info("No confusion matrix to plot")
        return None
    import matplotlib.pyplot as plt
    from sklearn.metrics import ConfusionMatrixDisplay

    disp = ConfusionMatrixDisplay(
        confusion_matrix=cm_df.to_numpy(),
        display_labels=["not legendary", "legendary"],
    )
    fig, ax = plt.subplots(figsize=(5, 5))
    disp.plot(ax=ax, cmap="Blues", colorbar=False, values_format="d")
    ax.set_title("Confusion matrix (test set)", fontweight="bold")
    return _save(fig, out_file)


def plot_feature_importance(
    imp_df: pd.DataFrame, out_file: Path, top_n: int = 15
) -> Optional[Path]:
    """Bar plot of the strongest permutation importances."""
    if _is_empty(imp_df):
        logger.info("No feature importance to plot")
        return None
    import matplotlib.pyplot as plt

    plt.style.use(STYLE)
    top = imp_df.sort_values("importance_mean", ascending=False).head(top_n)
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.barh(
        top["feature"],
        top["importance_mean"],
        xerr=top["importance_std"],
        color="#348ABD",
    )
    ax.invert_yaxis()
    ax.set_xlabel("Mean drop in score")
    ax.set_ylabel("Feature")
    ax.set_title("Permutation importance", fontweight="bold")
    ax.grid(True, axis="x", linestyle="--", alpha=0.6)
    return _save(fig, out_file)


def plot_cv_scores(cv_df: pd.DataFrame, out_file: Path) -> Optional[Path]:
    """Box plot of per-fold cross-validation scores."""
    if _is_empty(cv_df):
        logger.info("No CV scores to plot")
        return None
    import matplotlib.pyplot as plt

    plt.style.use(STYLE)
    metrics = cv_df.drop(columns=["fold"], errors="ignore")
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.boxplot([metrics[c].dropna() for c in metrics.columns])
    ax.set_xticks(range(1, len(metrics.columns) + 1))
    ax.set_xticklabels(metrics.columns)
    ax.set_ylim(0, 1.05)
    ax.set_ylabel("Score")
    ax.set_title(f"{len(cv_df)}-fold cross-validation", fontweight="bold")
    ax.grid(True, axis="y", linestyle="--", alpha=0.6)
    return _save(fig, out_file)


def create_report_figures(result: Dict, viz_dir: Path) -> Dict[str, Path]:
    """Render every figure for a training result into ``viz_dir``."""
    viz_dir = Path(viz_dir)
    plots = {
        "class_balance": plot_class_balance(
            result.get("labels"), viz_dir / "class_balance.png"
        ),
        "missing_values": plot_missing_values(
            result.get("missing"), viz_dir / "missing_values.png"
        ),
        "confusion_matrix": plot_confusion_matrix(
            result.get("confusion"), viz_dir / "confusion_matrix.png"
        ),
        "feature_importance": plot_feature_importance(
            result.get("importances"), viz_dir / "feature_importance.png"
        ),
        "cv_scores": plot_cv_scores(
            result.get("cv_scores"), viz_dir / "cv_scores.png"
        ),
    }
    return {name: path for name, path in plots.items() if path is not None}
