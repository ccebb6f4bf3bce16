"""Permutation importance of the legendary classifier's features."""
from __future__ import annotations

import logging
from typing import Iterable

import pandas as pd
from sklearn.inspection import permutation_importance as _perm_importance

from .preprocess import CATEGORICAL_COLS

logger = logging.getLogger(__name__)


def compute_permutation_importance(
    model,
    X: pd.DataFrame,
    y: pd.Series,
    *,
    n_repeats: int = 5,
    random_state: int = 42,
    scoring: str = "f1",
):
    """Return permutation importance mean and std as a DataFrame.

    Parameters
    ----------
    model
        Fitted classifier or pipeline with a ``predict`` method. A pipeline
        that imputes may be scored on raw features with gaps.
    X
        Held-out feature matrix.
    y
        Legendary labels corresponding to ``X``.
    n_repeats
        Number of random shuffles per feature.
    random_state
        Seed for the random generator.
    scoring
        Scorer name. ``f1`` tracks the rare legendary class rather than
        overall accuracy.
    """
    result = _perm_importance(
        model,
        X,
        y,
        n_repeats=n_repeats,
        random_state=random_state,
        scoring=scoring,
    )
    imp_df = pd.DataFrame(
        {
            "feature": X.columns,
            "importance_mean": result.importances_mean,
            "importance_std": result.importances_std,
        }
    )
    imp_df["importance_mean_minus_std"] = imp_df["importance_mean"] - imp_df["importance_std"]
    imp_df = imp_df.sort_values("importance_mean", ascending=False, ignore_index=True)
    logger.info("Top features by %s drop: %s", scoring, imp_df["feature"].head(5).tolist())
    return imp_df


def summarize_by_group(
    imp_df: pd.DataFrame, groups: Iterable[str] = CATEGORICAL_COLS
) -> pd.DataFrame:
    """Collapse one-hot dummies back onto their source column.

    ``type1_fire`` and ``type1_water`` are reported together as ``type1``
    with their importances summed. Features outside ``groups`` pass through
    unchanged. Returns ``feature``, ``importance_mean`` and ``n_columns``.
    """
    groups = list(groups)

    def _source(feature: str) -> str:
        for group in groups:
            if feature.startswith(f"{group}_"):
                return group
        return feature

    grouped = (
        imp_df.assign(feature=imp_df["feature"].map(_source))
        .groupby("feature", sort=False)
        .agg(importance_mean=("importance_mean", "sum"), n_columns=("importance_mean", "size"))
        .reset_index()
    )
    return grouped.sort_values("importance_mean", ascending=False, ignore_index=True)
