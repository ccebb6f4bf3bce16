import pytest

pd = pytest.importorskip("pandas")
matplotlib = pytest.importorskip("matplotlib")
matplotlib.use("Agg")

from legendary import visualization


def test_plots_write_png_and_svg(tmp_path):
    cm = pd.DataFrame(
        [[30, 2], [1, 7]],
        index=["actual_0", "actual_1"],
        columns=["predicted_0", "predicted_1"],
    )
    imp = pd.DataFrame(
        {"feature": ["capture_rate", "base_total"], "importance_mean": [0.3, 0.1], "importance_std": [0.05, 0.02]}
    )
    cv = pd.DataFrame({"fold": [1, 2, 3], "accuracy": [0.9, 0.95, 0.92], "f1": [0.7, 0.8, 0.75]})
    missing = pd.DataFrame({"missing": [20, 5], "fraction": [0.1, 0.025]}, index=["height_m", "capture_rate"])
    y = pd.Series([0] * 36 + [1] * 4)

    outputs = [
        visualization.plot_confusion_matrix(cm, tmp_path / "cm.png"),
        visualization.plot_feature_importance(imp, tmp_path / "imp.png"),
        visualization.plot_cv_scores(cv, tmp_path / "cv.png"),
        visualization.plot_missing_values(missing, tmp_path / "missing.png"),
        visualization.plot_class_balance(y, tmp_path / "balance.png"),
    ]
    for out in outputs:
        assert out.exists()
        assert out.with_suffix(".svg").exists()


def test_plots_skip_empty_input(tmp_path):
    assert visualization.plot_confusion_matrix(pd.DataFrame(), tmp_path / "cm.png") is None
    assert visualization.plot_missing_values(pd.DataFrame(), tmp_path / "m.png") is None
    assert visualization.plot_class_balance(None, tmp_path / "b.png") is None
    assert not list(tmp_path.iterdir())


def test_create_report_figures_skips_missing_parts(tmp_path):
    cv = pd.DataFrame({"fold": [1, 2], "accuracy": [0.9, 0.95]})
    paths = visualization.create_report_figures({"cv_scores": cv}, tmp_path / "viz")
    assert set(paths) == {"cv_scores"}
    assert paths["cv_scores"].exists()
