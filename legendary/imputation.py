"""k-nearest-neighbour imputation on standardised features."""
from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.impute import KNNImputer
from sklearn.preprocessing import StandardScaler
from sklearn.utils.validation import check_is_fitted

logger = logging.getLogger(__name__)


class ScaledKNNImputer(TransformerMixin, BaseEstimator):
    """Fill gaps from the nearest rows in standardised feature space.

    Raw columns live on very different scales (``weight_kg`` runs into the
    hundreds while damage multipliers stay below 4), so neighbours are found
    after standardisation and the imputed values are mapped back to the
    original units. Observed values pass through untouched.

    Parameters
    ----------
    n_neighbors : int
        Number of donor rows averaged for each missing value.
    weights : {"uniform", "distance"}
        Donor weighting passed to :class:`~sklearn.impute.KNNImputer`.
    """

    def __init__(self, n_neighbors: int = 5, weights: str = "uniform"):
        self.n_neighbors = n_neighbors
        self.weights = weights

    @staticmethod
    def _as_frame(X) -> pd.DataFrame:
        frame = X if isinstance(X, pd.DataFrame) else pd.DataFrame(np.asarray(X))
        return frame.astype(float)

    def fit(self, X, y=None):
        frame = self._as_frame(X)
        self.columns_ = list(frame.columns)
        self.empty_columns_ = [c for c in frame.columns if frame[c].isna().all()]
        if self.empty_columns_:
            logger.warning(
                "Columns without any observed value filled with 0: %s",
                self.empty_columns_,
            )
            frame[self.empty_columns_] = 0.0
        values = frame.to_numpy(dtype=float)
        self.scaler_ = StandardScaler().fit(values)
        self.knn_ = KNNImputer(n_neighbors=self.n_neighbors, weights=self.weights)
        self.knn_.fit(self.scaler_.transform(values))
        return self

    def transform(self, X):
        check_is_fitted(self, "knn_")
        frame = self._as_frame(X)
        if list(frame.columns) != self.columns_:
            frame = frame.reindex(columns=self.columns_)
        if self.empty_columns_:
            frame[self.empty_columns_] = 0.0
        scaled = self.scaler_.transform(frame.to_numpy(dtype=float))
        filled = self.scaler_.inverse_transform(self.knn_.transform(scaled))
        imputed = pd.DataFrame(filled, index=frame.index, columns=self.columns_)
        out = frame.where(frame.notna(), imputed)
        n_filled = int(frame.isna().to_numpy().sum())
        if n_filled:
            logger.debug("Imputed %d missing value(s)", n_filled)
        if isinstance(X, pd.DataFrame):
            return out
        return out.to_numpy()


def impute_features(X_train, X_test=None, n_neighbors: int = 5):
    """Fit a :class:`ScaledKNNImputer` on ``X_train`` and apply it.

    Returns ``(X_train_imputed, X_test_imputed_or_None, imputer)``. The test
    rows never influence the fitted donors.
    """
    imputer = ScaledKNNImputer(n_neighbors=n_neighbors)
    X_train_imp = imputer.fit_transform(X_train)
    X_test_imp = imputer.transform(X_test) if X_test is not None else None
    return X_train_imp, X_test_imp, imputer
