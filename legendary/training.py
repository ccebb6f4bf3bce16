"""Legendary classifier training workflow."""
import argparse
import logging
from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd
from sklearn.model_selection import train_test_split

from .evaluation import (
    classification_summary,
    confusion_table,
    cross_validate_model,
    evaluate_predictions,
    summarize_cv,
)
from .models.rf_model import build_pipeline, train_rf
from .permutation_importance import compute_permutation_importance, summarize_by_group
from .preprocess import (
    DROP_COLS,
    TARGET_COL,
    clean_pokemon,
    load_pokemon,
    missing_report,
    split_features_target,
)
from .utils import (
    generate_sample_data,
    load_config,
    log_df_details,
    log_offline_mode,
    timed_stage,
)
from .utils.schema_guard import hash_schema, save_with_schema

PROJECT_ROOT = Path(__file__).resolve().parents[1]
CONFIG_PATH = PROJECT_ROOT / "config.yaml"
CONFIG = load_config(CONFIG_PATH)

RUN_TIMESTAMP = pd.Timestamp.now(tz="UTC").isoformat()

CV_SCORING = ("accuracy", "balanced_accuracy", "f1", "roc_auc")

logger = logging.getLogger(__name__)


def _resolve(path: Union[str, Path], base: Union[str, Path] = PROJECT_ROOT) -> Path:
    """Return ``path`` as given if absolute, else relative to ``base``.

    ``base`` is the directory of the config file that named the path.
    """
    path = Path(path)
    if path.is_absolute():
        return path
    return Path(base) / path


def split_train_test(
    df: pd.DataFrame,
    target_col: str = TARGET_COL,
    test_size: float = 0.2,
    random_state: int = 42,
):
    """Return stratified train and test splits ensuring no overlap."""
    if df.empty:
        return df, df

    df_train, df_test = train_test_split(
        df,
        test_size=test_size,
        random_state=random_state,
        stratify=df[target_col],
    )
    overlap = df_train.index.intersection(df_test.index)
    if len(overlap):
        raise ValueError(f"Train and test share {len(overlap)} rows, e.g. {overlap[0]!r}")
    return df_train, df_test


def train_models(
    data: Union[pd.DataFrame, str, Path, None] = None,
    config: Optional[dict] = None,
    results_dir: Union[str, Path, None] = None,
    model_path: Union[str, Path, None] = None,
    make_plots: bool = True,
) -> Dict:
    """Run the full workflow: load, clean, split, cross-validate, train, evaluate.

    ``data`` is either a raw frame or a CSV path. When omitted, the
    ``data_path`` from the config is read. Tables are written to
    ``results_dir`` and the model to ``model_path`` only when those are given.
    """
    config = CONFIG if config is None else config
    target_col = config.get("target_col", TARGET_COL)
    drop_cols = list(config.get("drop_cols", DROP_COLS))
    seed = config.get("random_state", 42)
    cv_folds = config.get("cv_folds", 5)
    n_neighbors = config.get("n_neighbors", 5)
    scoring = config.get("scoring", "f1")
    rf_params = config.get("rf_params") or {}

    if data is None:
        data = _resolve(
            config.get("data_path", "data/pokemon.csv"),
            config.get("config_dir", PROJECT_ROOT),
        )
    raw = load_pokemon(data) if isinstance(data, (str, Path)) else data
    log_df_details("input data", raw)

    with timed_stage("clean"):
        df = clean_pokemon(
            raw,
            drop_cols=drop_cols,
            target_col=target_col,
        )
    X, y = split_features_target(df, target_col)
    missing = missing_report(X)
    logger.info("Columns with missing values:\n%s", missing)

    df_train, df_test = split_train_test(
        df, target_col, test_size=config.get("test_size", 0.2), random_state=seed
    )
    X_train, y_train = split_features_target(df_train, target_col)
    X_test, y_test = split_features_target(df_test, target_col)
    logger.info(
        "train %d rows (%.1f%% legendary) | test %d rows (%.1f%% legendary)",
        len(y_train),
        100 * y_train.mean(),
        len(y_test),
        100 * y_test.mean(),
    )

    with timed_stage("k-fold cross-validation"):
        baseline = build_pipeline(n_neighbors=n_neighbors, random_state=seed, **rf_params)
        cv_scores = cross_validate_model(
            baseline,
            X_train,
            y_train,
            cv=cv_folds,
            random_state=seed,
            scoring=config.get("cv_scoring", CV_SCORING),
        )
    cv_summary = summarize_cv(cv_scores)

    with timed_stage("train RF"):
        model = train_rf(
            X_train,
            y_train,
            param_grid=config.get("rf_param_grid"),
            cv=cv_folds,
            n_iter=config.get("n_iter", 10),
            scoring=scoring,
            random_state=seed,
            n_neighbors=n_neighbors,
            **rf_params,
        )

    metrics_rows = []
    for dataset, X_part, y_part in (("train", X_train, y_train), ("test", X_test, y_test)):
        preds = model.predict(X_part)
        proba = model.predict_proba(X_part)[:, 1]
        metrics = evaluate_predictions(y_part, preds, proba)
        metrics_rows.append(
            {
                "model": "rf",
                "dataset": dataset,
                **metrics,
                "rows": len(y_part),
                "run_date": RUN_TIMESTAMP,
            }
        )
        if dataset == "test":
            test_preds = preds
    metrics_df = pd.DataFrame(metrics_rows)
    logger.info("Metrics summary:\n%s", metrics_df)

    confusion = confusion_table(y_test, test_preds)
    report = classification_summary(y_test, test_preds)
    logger.info("Confusion matrix:\n%s", confusion)

    with timed_stage("permutation importance"):
        importances = compute_permutation_importance(
            model,
            X_test,
            y_test,
            n_repeats=config.get("perm_repeats", 5),
            random_state=seed,
            scoring=scoring,
        )
    importance_groups = summarize_by_group(importances)
    logger.info("Importance by source column:\n%s", importance_groups.head(10))

    result = {
        "model": model,
        "features": list(X_train.columns),
        "labels": y,
        "metrics": metrics_df,
        "cv_scores": cv_scores,
        "cv_summary": cv_summary,
        "confusion": confusion,
        "report": report,
        "importances": importances,
        "importance_groups": importance_groups,
        "missing": missing,
        "paths": {},
    }

    if results_dir is not None:
        result["paths"].update(_write_results(result, Path(results_dir), make_plots))

    if model_path is not None:
        schema_hash = hash_schema(X_train)
        result["paths"]["model"] = save_with_schema(
            model,
            model_path,
            result["features"],
            schema_hash,
            cleaning={"target_col": target_col, "drop_cols": drop_cols},
        )

    log_offline_mode("training")
    return result


def _write_results(result: Dict, results_dir: Path, make_plots: bool) -> Dict[str, Path]:
    results_dir.mkdir(exist_ok=True, parents=True)
    stamp = RUN_TIMESTAMP[:10]
    tables = {
        "metrics": (result["metrics"], False),
        "cv_scores": (result["cv_scores"], False),
        "importances": (result["importances"], False),
        "importance_groups": (result["importance_groups"], False),
        "confusion": (result["confusion"], True),
    }
    paths = {}
    for name, (table, keep_index) in tables.items():
        out_file = results_dir / f"{name}_{stamp}.csv"
        table.to_csv(out_file, index=keep_index)
        logger.info("Saved %s to %s", name, out_file)
        paths[name] = out_file

    if make_plots:
        from .visualization import create_report_figures

        paths.update(create_report_figures(result, results_dir / "viz"))
    return paths


def main(argv=None) -> None:
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description="Train the legendary Pokemon classifier")
    parser.add_argument("--config", default=str(CONFIG_PATH), help="YAML config file")
    parser.add_argument("--data", help="Pokemon CSV, overrides data_path")
    parser.add_argument(
        "--sample",
        action="store_true",
        help="use generated sample data instead of a CSV",
    )
    parser.add_argument("--results-dir", help="directory for tables and figures")
    parser.add_argument("--model-out", help="path for the trained model (.joblib)")
    parser.add_argument("--no-plots", action="store_true", help="skip figures")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    config.setdefault("config_dir", str(Path(args.config).resolve().parent))
    if args.sample:
        data = generate_sample_data(
            n_rows=config.get("sample_rows", 800), seed=config.get("random_state", 42)
        )
    else:
        data = args.data

    result = train_models(
        data,
        config=config,
        results_dir=args.results_dir or config.get("results_dir"),
        model_path=args.model_out or config.get("model_path"),
        make_plots=not args.no_plots,
    )

    print("Cross-validation (train set):")
    print(result["cv_summary"].to_string())
    print()
    print("Confusion matrix (test set):")
    print(result["confusion"].to_string())
    print()
    print(result["report"])


if __name__ == "__main__":
    main()
