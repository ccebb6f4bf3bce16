import pytest

np = pytest.importorskip("numpy")
pd = pytest.importorskip("pandas")
pytest.importorskip("sklearn")

from legendary.imputation import ScaledKNNImputer, impute_features
from legendary.preprocess import clean_pokemon, split_features_target
from legendary.utils import generate_sample_data


def _features(n_rows=120, seed=0):
    X, _ = split_features_target(clean_pokemon(generate_sample_data(n_rows, seed)))
    return X


def test_imputer_fills_all_gaps_and_keeps_observed():
    X = _features()
    assert X.isna().any().any()
    out = ScaledKNNImputer().fit_transform(X)
    assert isinstance(out, pd.DataFrame)
    assert list(out.columns) == list(X.columns)
    assert out.index.equals(X.index)
    assert not out.isna().any().any()
    observed = X.notna().to_numpy()
    assert np.array_equal(
        out.to_numpy(dtype=float)[observed], X.to_numpy(dtype=float)[observed]
    )


def test_imputer_uses_nearest_rows():
    X = pd.DataFrame({"a": [1.0, 2.0, 3.0, 100.0], "b": [1.0, np.nan, 3.0, 100.0]})
    out = ScaledKNNImputer(n_neighbors=2).fit_transform(X)
    assert out.loc[1, "b"] == pytest.approx(2.0)


def test_imputer_fills_empty_column_with_zero():
    X = pd.DataFrame({"a": [1.0, 2.0, 3.0], "c": [np.nan, np.nan, np.nan]})
    out = ScaledKNNImputer(n_neighbors=1).fit_transform(X)
    assert (out["c"] == 0).all()


def test_imputer_array_input():
    arr = np.array([[1.0, 2.0], [np.nan, 3.0], [2.0, 4.0]])
    out = ScaledKNNImputer(n_neighbors=1).fit_transform(arr)
    assert isinstance(out, np.ndarray)
    assert not np.isnan(out).any()


def test_impute_features_fits_on_train_only():
    X = _features()
    X_train, X_test = X.iloc[:90], X.iloc[90:]
    train_imp, test_imp, imputer = impute_features(X_train, X_test, n_neighbors=3)
    refit = ScaledKNNImputer(n_neighbors=3).fit(X_train)
    pd.testing.assert_frame_equal(test_imp, refit.transform(X_test))
    assert not train_imp.isna().any().any()
    assert not test_imp.isna().any().any()


def test_impute_features_is_deterministic():
    X = _features()
    a, _, _ = impute_features(X)
    b, _, _ = impute_features(X)
    pd.testing.assert_frame_equal(a, b)
