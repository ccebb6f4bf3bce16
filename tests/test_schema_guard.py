import pytest

pd = pytest.importorskip("pandas")
pytest.importorskip("sklearn")
from sklearn.dummy import DummyClassifier

from legendary.utils.schema_guard import (
    hash_schema,
    load_with_schema,
    read_sidecar,
    save_with_schema,
    validate_schema,
)


def test_validate_schema_success():
    df = pd.DataFrame({"hp": [1], "attack": [2], "speed": [3]})
    schema_hash = hash_schema(df)
    validate_schema(list(df.columns), df, schema_hash)


def test_validate_schema_missing():
    df = pd.DataFrame({"hp": [1], "attack": [2]})
    feature_list = ["hp", "attack", "speed"]
    schema_hash = hash_schema(pd.DataFrame(columns=feature_list))
    with pytest.raises(SystemExit) as exc:
        validate_schema(feature_list, df, schema_hash)
    assert exc.value.code == 99


def test_hash_depends_on_column_order():
    a = pd.DataFrame(columns=["hp", "speed"])
    b = pd.DataFrame(columns=["speed", "hp"])
    assert hash_schema(a) != hash_schema(b)


def test_save_and_load_with_schema(tmp_path):
    X = pd.DataFrame({"hp": [1, 2, 3, 4]})
    model = DummyClassifier(strategy="most_frequent").fit(X, [0, 0, 0, 1])
    path = save_with_schema(model, tmp_path / "m" / "model.joblib", ["hp"], hash_schema(X))
    assert path.exists()
    assert path.with_suffix(".json").exists()
    loaded, features, schema_hash = load_with_schema(path)
    assert features == ["hp"]
    assert schema_hash == hash_schema(X)
    assert list(loaded.predict(X)) == [0, 0, 0, 0]


def test_sidecar_records_cleaning(tmp_path):
    X = pd.DataFrame({"hp": [1, 2]})
    model = DummyClassifier().fit(X, [0, 1])
    path = save_with_schema(
        model,
        tmp_path / "model.joblib",
        ["hp"],
        hash_schema(X),
        cleaning={"target_col": "is_legendary", "drop_cols": ["abilities"]},
    )
    meta = read_sidecar(path)
    assert meta["cleaning"]["drop_cols"] == ["abilities"]
    assert meta["schema_hash"] == hash_schema(["hp"])
