"""Data loading and cleaning for the Pokemon attribute table."""
import logging
from pathlib import Path
from typing import Iterable, List, Tuple, Union

import pandas as pd

from .utils import timed_stage, log_df_details

logger = logging.getLogger(__name__)

TARGET_COL = "is_legendary"
ID_COL = "name"
# identifiers and free text that carry no signal for the classifier
DROP_COLS = ["japanese_name", "classfication", "abilities", "pokedex_number"]
CATEGORICAL_COLS = ["type1", "type2"]
BASE_STATS = ["hp", "attack", "defense", "sp_attack", "sp_defense", "speed"]
REQUIRED_COLS = [TARGET_COL] + BASE_STATS
DUMMY_PREFIXES = tuple(f"{c}_" for c in CATEGORICAL_COLS)


def load_pokemon(path: Union[str, Path]) -> pd.DataFrame:
    """Read the raw Pokemon CSV from disk."""
    with timed_stage(f"load {path}"):
        df = pd.read_csv(path)
    log_df_details("raw pokemon", df)
    return df


def _binary_target(target: pd.Series) -> pd.Series:
    """Cast labels to 0/1. Missing labels stay missing as nullable ``Int64``."""
    if pd.api.types.is_object_dtype(target) or pd.api.types.is_string_dtype(target):
        labelled = target.notna()
        mapped = target.astype(str).str.strip().str.lower().map(
            {"true": 1, "false": 0, "1": 1, "0": 0, "1.0": 1, "0.0": 0}
        )
        unknown = labelled & mapped.isna()
        if unknown.any():
            bad = sorted(target[unknown].astype(str).unique())
            raise ValueError(f"Target must be binary 0/1, found values {bad}")
        target = mapped.where(labelled)
    elif pd.api.types.is_bool_dtype(target):
        target = target.astype(int)
    values = set(pd.unique(target.dropna()))
    if not values <= {0, 1}:
        raise ValueError(f"Target must be binary 0/1, found values {sorted(map(str, values))}")
    if target.isna().any():
        return target.astype("Int64")
    return target.astype(int)


def clean_pokemon(
    df: pd.DataFrame,
    drop_cols: Iterable[str] = DROP_COLS,
    target_col: str = TARGET_COL,
    require_target: bool = True,
) -> pd.DataFrame:
    """Return a fully numeric table ready for imputation and training.

    Parameters
    ----------
    df : pd.DataFrame
        Raw table as read by :func:`load_pokemon`.
    drop_cols : iterable of str, optional
        Identifier and text columns to remove. Absent columns are ignored.
    target_col : str, optional
        Name of the binary label column.
    require_target : bool, optional
        When ``True`` rows without a label are dropped. When ``False`` the
        label may be absent or partly filled, which is the case when scoring
        new rows: every row is kept and missing labels stay ``<NA>``.

    Notes
    -----
    Malformed numeric strings (``capture_rate`` holds one) become NaN and are
    left for the imputer. Missing ``percentage_male`` means the creature is
    genderless, so that fact is kept as a ``genderless`` indicator before the
    value itself is imputed.
    """
    required = REQUIRED_COLS if require_target else BASE_STATS
    required = [target_col if c == TARGET_COL else c for c in required]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    df = df.copy()
    if ID_COL in df.columns:
        df = df.set_index(ID_COL)
    df = df.drop(columns=[c for c in drop_cols if c in df.columns])

    if target_col in df.columns:
        if require_target:
            unlabelled = int(df[target_col].isna().sum())
            if unlabelled:
                logger.warning("Dropping %d row(s) without %s", unlabelled, target_col)
                df = df.dropna(subset=[target_col])
        df[target_col] = _binary_target(df[target_col])

    categorical = [c for c in CATEGORICAL_COLS if c in df.columns]
    for col in df.columns:
        if col in categorical or col == target_col:
            continue
        if not pd.api.types.is_numeric_dtype(df[col]):
            before = df[col].isna().sum()
            df[col] = pd.to_numeric(df[col], errors="coerce")
            coerced = int(df[col].isna().sum() - before)
            if coerced:
                logger.warning("%s: %d malformed value(s) set to NaN", col, coerced)

    if "percentage_male" in df.columns:
        df["genderless"] = df["percentage_male"].isna().astype(int)

    for col in categorical:
        df[col] = df[col].fillna("none").astype(str).str.lower()
    if categorical:
        df = pd.get_dummies(df, columns=categorical, dtype=int)

    log_df_details("cleaned pokemon", df)
    return df


def split_features_target(
    df: pd.DataFrame, target_col: str = TARGET_COL
) -> Tuple[pd.DataFrame, pd.Series]:
    """Separate the feature matrix from the label."""
    return df.drop(columns=[target_col]), df[target_col]


def missing_report(df: pd.DataFrame) -> pd.DataFrame:
    """Return missing counts and fractions for columns that have gaps."""
    counts = df.isna().sum()
    report = pd.DataFrame(
        {"missing": counts, "fraction": counts / max(len(df), 1)}
    )
    report = report[report["missing"] > 0].sort_values("missing", ascending=False)
    report.index.name = "column"
    return report


def align_features(df: pd.DataFrame, features: List[str]) -> pd.DataFrame:
    """Order ``df`` like ``features``, adding absent type dummies as zeros.

    Only one-hot type columns are filled in. Any other missing feature is
    left out so that schema validation reports it.
    """
    df = df.copy()
    for col in features:
        if col not in df.columns and col.startswith(DUMMY_PREFIXES):
            df[col] = 0
    unseen = [c for c in df.columns if c.startswith(DUMMY_PREFIXES) and c not in features]
    if unseen:
        logger.info("Ignoring type columns unseen during training: %s", unseen)
    return df[[c for c in features if c in df.columns]]
