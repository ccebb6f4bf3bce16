"""Random Forest classifier with k-NN imputation and cross-validated tuning."""
import logging
import math
import time
from typing import Any, Dict, Sequence, Union

from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import BaseCrossValidator, RandomizedSearchCV
from sklearn.pipeline import Pipeline

from ..imputation import ScaledKNNImputer
from ..utils import stratified_cv

logger = logging.getLogger(__name__)

DEFAULT_PARAM_GRID = {
    "n_estimators": [100, 200, 300],
    "max_depth": [None, 5, 10],
    "min_samples_leaf": [1, 2, 4],
    "class_weight": [None, "balanced"],
}


def build_pipeline(n_neighbors: int = 5, random_state: int = 42, **rf_kwargs) -> Pipeline:
    """Return the impute-then-classify pipeline.

    Imputation sits inside the pipeline so it is refit on every training fold.
    """
    return Pipeline(
        [
            ("impute", ScaledKNNImputer(n_neighbors=n_neighbors)),
            ("rf", RandomForestClassifier(random_state=random_state, **rf_kwargs)),
        ]
    )


def _grid_size(param_grid: Dict[str, Sequence]) -> int:
    return math.prod(len(v) for v in param_grid.values())


def train_rf(
    X_train,
    y_train,
    param_grid: Dict[str, Sequence] | None = None,
    cv: Union[int, BaseCrossValidator] = 5,
    n_iter: int = 10,
    scoring: str = "f1",
    random_state: int = 42,
    n_neighbors: int = 5,
    **kwargs,
) -> Any:
    """Train a Random Forest with optional cross-validated search.

    Parameters
    ----------
    X_train, y_train
        Training features (may contain NaN) and binary target.
    param_grid
        Parameter distributions for :class:`RandomizedSearchCV`, keyed by
        plain ``RandomForestClassifier`` argument names. ``None`` uses a small
        default space and ``{}`` skips the search entirely.
    cv
        Number of stratified folds or a ready splitter.
    n_iter
        Number of parameter settings that are sampled, capped at the grid size.
    scoring
        Metric optimised by the search. ``f1`` suits the rare positive class.
    kwargs
        Extra parameters passed directly to ``RandomForestClassifier``.
    """

    start = time.perf_counter()
    logger.info("Training Random Forest classifier")

    if param_grid is None:
        param_grid = DEFAULT_PARAM_GRID

    try:
        pipeline = build_pipeline(n_neighbors=n_neighbors, random_state=random_state, **kwargs)
        if not param_grid:
            model = pipeline.fit(X_train, y_train)
            logger.info("RF fitted without search")
        else:
            splitter = (
                stratified_cv(y_train, n_splits=cv, random_state=random_state)
                if isinstance(cv, int)
                else cv
            )
            n_candidates = min(n_iter, _grid_size(param_grid))
            logger.info("Sampling %d of %d RF settings", n_candidates, _grid_size(param_grid))
            search = RandomizedSearchCV(
                pipeline,
                param_distributions={f"rf__{k}": v for k, v in param_grid.items()},
                cv=splitter,
                scoring=scoring,
                n_jobs=-1,
                n_iter=n_candidates,
                random_state=random_state,
            )
            search.fit(X_train, y_train)
            model = search.best_estimator_
            best = {k.split("__", 1)[1]: v for k, v in search.best_params_.items()}
            logger.info("RF best params: %s (%s=%.4f)", best, scoring, search.best_score_)
    except Exception:
        logger.exception("Error while training Random Forest")
        raise
    finally:
        duration = time.perf_counter() - start
        logger.info("Random Forest training finished in %.2f seconds", duration)

    return model
