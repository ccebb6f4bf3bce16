import pytest

pd = pytest.importorskip("pandas")
pytest.importorskip("sklearn")

from legendary import training
from legendary.utils import generate_sample_data

FAST_CONFIG = {
    "random_state": 0,
    "test_size": 0.2,
    "cv_folds": 3,
    "cv_scoring": ["accuracy", "f1"],
    "n_neighbors": 3,
    "n_iter": 2,
    "perm_repeats": 2,
    "rf_params": {"n_estimators": 20},
    "rf_param_grid": {"max_depth": [3, None]},
}


def test_train_models_result():
    raw = generate_sample_data(n_rows=200, seed=0)
    result = training.train_models(raw, config=FAST_CONFIG)

    for key in ["model", "features", "metrics", "cv_scores", "cv_summary",
                "confusion", "report", "importances", "missing", "paths"]:
        assert key in result
    assert list(result["metrics"]["dataset"]) == ["train", "test"]
    assert "roc_auc" in result["metrics"].columns
    assert result["confusion"].to_numpy().sum() == 40
    assert len(result["cv_scores"]) == 3
    assert set(result["importances"]["feature"]) == set(result["features"])
    groups = result["importance_groups"]
    assert {"type1", "type2", "hp"} <= set(groups["feature"])
    assert not groups["feature"].str.startswith("type1_").any()
    assert "height_m" in result["missing"].index
    assert result["paths"] == {}


def test_train_models_is_reproducible():
    raw = generate_sample_data(n_rows=200, seed=0)
    first = training.train_models(raw, config=FAST_CONFIG)
    second = training.train_models(raw, config=FAST_CONFIG)
    cols = ["dataset", "accuracy", "f1", "roc_auc"]
    pd.testing.assert_frame_equal(first["metrics"][cols], second["metrics"][cols])
    pd.testing.assert_frame_equal(first["confusion"], second["confusion"])


def test_train_models_without_search():
    config = dict(FAST_CONFIG, rf_param_grid={})
    result = training.train_models(generate_sample_data(n_rows=150, seed=1), config=config)
    assert result["model"].named_steps["rf"].n_estimators == 20


def test_train_models_writes_results(tmp_path):
    pytest.importorskip("matplotlib")
    import matplotlib

    matplotlib.use("Agg")
    csv = tmp_path / "pokemon.csv"
    generate_sample_data(n_rows=200, seed=0).to_csv(csv, index=False)
    result = training.train_models(
        csv,
        config=FAST_CONFIG,
        results_dir=tmp_path / "results",
        model_path=tmp_path / "models" / "rf.joblib",
    )
    paths = result["paths"]
    for name in ["metrics", "cv_scores", "importances", "importance_groups", "confusion", "model"]:
        assert paths[name].exists()
    assert (tmp_path / "models" / "rf.json").exists()
    assert paths["confusion_matrix"].exists()
    assert paths["confusion_matrix"].with_suffix(".svg").exists()
    metrics = pd.read_csv(paths["metrics"])
    assert set(metrics["dataset"]) == {"train", "test"}


def test_train_models_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        training.train_models(tmp_path / "absent.csv", config=FAST_CONFIG)


def test_main_with_sample(tmp_path, capsys):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "random_state: 0\n"
        "cv_folds: 3\n"
        "n_iter: 1\n"
        "perm_repeats: 1\n"
        "sample_rows: 150\n"
        "rf_params:\n  n_estimators: 10\n"
        "rf_param_grid:\n  max_depth: [3]\n"
    )
    training.main([
        "--config", str(cfg),
        "--sample",
        "--results-dir", str(tmp_path / "out"),
        "--model-out", str(tmp_path / "rf.joblib"),
        "--no-plots",
    ])
    out = capsys.readouterr().out
    assert "Confusion matrix" in out
    assert "legendary" in out
    assert (tmp_path / "rf.joblib").exists()
    assert not (tmp_path / "out" / "viz").exists()


def test_main_reads_data_relative_to_config(tmp_path, monkeypatch, capsys):
    project = tmp_path / "project"
    (project / "data").mkdir(parents=True)
    generate_sample_data(n_rows=150, seed=2).to_csv(project / "data" / "pokemon.csv", index=False)
    cfg = project / "config.yaml"
    cfg.write_text(
        "data_path: data/pokemon.csv\n"
        "random_state: 0\n"
        "cv_folds: 3\n"
        "perm_repeats: 1\n"
        "rf_params:\n  n_estimators: 10\n"
        "rf_param_grid: {}\n"
    )
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)

    training.main(["--config", str(cfg), "--results-dir", str(tmp_path / "out"), "--no-plots"])
    assert "Confusion matrix" in capsys.readouterr().out
    assert not (elsewhere / "data").exists()
