"""Score new Pokemon rows with a saved legendary classifier."""
import argparse
import logging
from pathlib import Path
from typing import Union

import pandas as pd

from .preprocess import DROP_COLS, TARGET_COL, align_features, clean_pokemon, load_pokemon
from .utils import log_df_details
from .utils.schema_guard import load_with_schema, read_sidecar, validate_schema

logger = logging.getLogger(__name__)


def predict_legendary(
    model_path: Union[str, Path],
    df: pd.DataFrame,
    threshold: float = 0.5,
) -> pd.DataFrame:
    """Return legendary probability and label for every row of a raw table.

    The label column is optional and may be partly filled. Rows are cleaned
    with the settings recorded at training time, aligned to the saved
    feature list and checked against the stored schema hash before
    prediction. Known labels are returned as ``actual_legendary``.
    """
    model, feature_list, schema_hash = load_with_schema(model_path)
    cleaning = read_sidecar(model_path).get("cleaning") or {}
    target_col = cleaning.get("target_col", TARGET_COL)
    drop_cols = cleaning.get("drop_cols", DROP_COLS)

    cleaned = clean_pokemon(
        df, drop_cols=drop_cols, target_col=target_col, require_target=False
    )
    X_live = align_features(cleaned.drop(columns=[target_col], errors="ignore"), feature_list)
    validate_schema(feature_list, X_live, schema_hash)

    proba = model.predict_proba(X_live)[:, 1]
    result = pd.DataFrame(
        {
            "legendary_proba": proba.round(4),
            "predicted_legendary": (proba >= threshold).astype(int),
        },
        index=X_live.index,
    )
    if target_col in cleaned.columns:
        result["actual_legendary"] = cleaned[target_col]
    if len(result) != len(df):
        logger.warning("Scored %d of %d input rows", len(result), len(df))
    log_df_details("predictions", result)
    return result


def main(argv=None) -> None:
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description="Predict legendary status")
    parser.add_argument("--model", required=True, help="saved .joblib model")
    parser.add_argument("--data", required=True, help="Pokemon CSV to score")
    parser.add_argument("--threshold", type=float, default=0.5)
    args = parser.parse_args(argv)

    preds = predict_legendary(args.model, load_pokemon(args.data), threshold=args.threshold)
    print(preds.to_string())


if __name__ == "__main__":
    main()
