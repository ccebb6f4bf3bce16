"""Classification metrics, confusion matrix and k-fold cross-validation."""
import logging
from typing import Iterable, Sequence

import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    balanced_accuracy_score,
    classification_report,
    confusion_matrix,
    f1_score,
    precision_score,
    recall_score,
    roc_auc_score,
)
from sklearn.model_selection import cross_validate

from .utils import stratified_cv

logger = logging.getLogger(__name__)

CLASS_NAMES = ["not legendary", "legendary"]


def evaluate_predictions(
    y_true: Sequence[int],
    y_pred: Sequence[int],
    y_proba: Sequence[float] | None = None,
) -> dict:
    """Return binary classification metrics rounded to 4 decimals."""
    metrics = {
        "accuracy": accuracy_score(y_true, y_pred),
        "balanced_accuracy": balanced_accuracy_score(y_true, y_pred),
        "precision": precision_score(y_true, y_pred, zero_division=0),
        "recall": recall_score(y_true, y_pred, zero_division=0),
        "f1": f1_score(y_true, y_pred, zero_division=0),
    }
    if y_proba is not None and len(set(y_true)) == 2:
        metrics["roc_auc"] = roc_auc_score(y_true, y_proba)
    logger.info("Evaluation metrics: %s", metrics)
    return {k: round(float(v), 4) for k, v in metrics.items()}


def confusion_table(
    y_true: Sequence[int],
    y_pred: Sequence[int],
    labels: Iterable[int] = (0, 1),
) -> pd.DataFrame:
    """Return the confusion matrix with labelled rows and columns."""
    labels = list(labels)
    cm = confusion_matrix(y_true, y_pred, labels=labels)
    return pd.DataFrame(
        cm,
        index=[f"actual_{l}" for l in labels],
        columns=[f"predicted_{l}" for l in labels],
    )


def classification_summary(y_true: Sequence[int], y_pred: Sequence[int]) -> str:
    return classification_report(
        y_true,
        y_pred,
        labels=[0, 1],
        target_names=CLASS_NAMES,
        zero_division=0,
    )


def cross_validate_model(
    model,
    X,
    y,
    cv: int = 5,
    random_state: int = 42,
    scoring: Sequence[str] = ("accuracy", "f1", "roc_auc"),
) -> pd.DataFrame:
    """Run stratified k-fold cross-validation and return one row per fold.

    Parameters
    ----------
    model
        Unfitted estimator or pipeline. It is cloned for every fold.
    X, y
        Features and binary target.
    cv
        Requested number of folds, capped by :func:`stratified_cv` so the
        minority class is present in every fold.
    random_state
        Seed fixing the fold assignment.
    scoring
        Scorer names understood by :func:`sklearn.model_selection.cross_validate`.
    """
    splitter = stratified_cv(y, n_splits=cv, random_state=random_state)
    scores = cross_validate(model, X, y, cv=splitter, scoring=list(scoring))
    cv_df = pd.DataFrame(
        {name: scores[f"test_{name}"] for name in scoring}
    )
    cv_df.insert(0, "fold", range(1, len(cv_df) + 1))
    logger.info(
        "%d-fold CV means: %s",
        splitter.get_n_splits(),
        cv_df.drop(columns="fold").mean().round(4).to_dict(),
    )
    return cv_df


def summarize_cv(cv_df: pd.DataFrame) -> pd.DataFrame:
    """Return mean and standard deviation for each CV metric."""
    metrics = cv_df.drop(columns=["fold"], errors="ignore")
    return pd.DataFrame({"mean": metrics.mean(), "std": metrics.std()}).round(4)
