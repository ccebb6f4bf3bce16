"""Persist the legendary classifier together with the feature layout it expects."""
import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

import joblib
import pandas as pd

logger = logging.getLogger(__name__)


def hash_schema(columns: Union[pd.DataFrame, Iterable[str]]) -> str:
    """Return a short SHA-1 of the ordered feature names.

    Accepts a frame or the column names themselves, so a stored feature list
    and a live frame hash the same way.
    """
    names = columns.columns if isinstance(columns, pd.DataFrame) else columns
    digest = hashlib.sha1("|".join(map(str, names)).encode()).hexdigest()
    return digest[:10]


def sidecar_path(model_path: Union[str, Path]) -> Path:
    return Path(model_path).with_suffix(".json")


def save_with_schema(
    model: Any,
    path: Union[str, Path],
    feature_list: Iterable[str],
    schema_hash: str,
    cleaning: Optional[Dict[str, Any]] = None,
) -> Path:
    """Save a model next to a JSON sidecar holding its feature schema.

    ``cleaning`` records how the training table was cleaned (label column,
    dropped columns) so scoring can repeat it.
    """
    p = Path(path)
    p.parent.mkdir(exist_ok=True, parents=True)
    joblib.dump(model, p)
    meta = {
        "features": list(feature_list),
        "schema_hash": schema_hash,
        "cleaning": cleaning or {},
    }
    sidecar_path(p).write_text(json.dumps(meta, indent=2))
    logger.info("Saved model to %s (%d features, schema %s)", p, len(meta["features"]), schema_hash)
    return p


def read_sidecar(path: Union[str, Path]) -> Dict[str, Any]:
    """Return the metadata stored next to a saved model."""
    meta_file = sidecar_path(path)
    if not meta_file.exists():
        raise FileNotFoundError(f"Schema file {meta_file} not found for model {path}")
    return json.loads(meta_file.read_text())


def load_with_schema(path: Union[str, Path]) -> Tuple[Any, list, str]:
    """Load a model and return it with its feature list and schema hash."""
    meta = read_sidecar(path)
    model = joblib.load(Path(path))
    features = meta.get("features", [])
    logger.info("Loaded model %s expecting %d features", path, len(features))
    return model, features, meta.get("schema_hash", "")


def validate_schema(feature_list: Iterable[str], df: pd.DataFrame, schema_hash: str) -> None:
    """Validate columns against stored schema, exit 99 on mismatch."""
    feature_list = list(feature_list)
    missing = [c for c in feature_list if c not in df.columns]
    live_hash = hash_schema(df[[c for c in feature_list if c in df.columns]])
    if missing or live_hash != schema_hash:
        logger.error("✖ SCHEMA MISMATCH ✖")
        logger.error("- Expected: %s columns (hash %s)", len(feature_list), schema_hash)
        logger.error("- Received: %s columns (hash %s)", df.shape[1], live_hash)
        if missing:
            logger.error("- Missing columns: %s", missing)
        logger.error("Hint: retrain the model on the current dataset layout.")
        raise SystemExit(99)
