import logging
import time
from pathlib import Path
from contextlib import contextmanager
from typing import Optional, Sequence, Union

from sklearn.model_selection import StratifiedKFold

import numpy as np
import pandas as pd
import yaml

# Flag to track whether sample data was generated at any stage
SAMPLE_DATA_USED = False

POKEMON_TYPES = [
    "bug", "dark", "dragon", "electric", "fairy", "fighting", "fire", "flying",
    "ghost", "grass", "ground", "ice", "normal", "poison", "psychic", "rock",
    "steel", "water",
]
# the raw dataset abbreviates "fighting" in its damage multiplier columns
AGAINST_COLS = [
    "against_" + ("fight" if t == "fighting" else t) for t in POKEMON_TYPES
]


def load_config(path: Union[str, Path]) -> dict:
    """Load the YAML configuration file.

    A missing or empty file yields an empty dict so callers can rely on
    ``config.get`` defaults.
    """
    logger = logging.getLogger(__name__)
    path = Path(path)
    if not path.exists():
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    with open(path, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


@contextmanager
def timed_stage(name: str):
    """Context manager to log start/end time of a stage."""
    logger = logging.getLogger(__name__)
    start = time.perf_counter()
    logger.info("-" * 40)
    logger.info("Starting %s", name)
    try:
        yield
    except Exception:
        logger.exception("Exception in %s", name)
        raise
    finally:
        duration = time.perf_counter() - start
        logger.info("Finished %s in %.2f seconds", name, duration)
        logger.info("-" * 40)


def log_df_details(name: str, df: Optional[pd.DataFrame], head: int = 5) -> None:
    """Log basic DataFrame information."""
    logger = logging.getLogger(__name__)
    if df is None:
        logger.info("%s: DataFrame is None", name)
        return
    rows, cols = df.shape
    logger.info("%s shape: %d rows, %d columns", name, rows, cols)
    if not df.empty:
        preview = df.head(head).to_string(max_cols=None)
        logger.info("%s head:\n%s", name, preview)


def generate_sample_data(n_rows: int = 160, seed: int = 0) -> pd.DataFrame:
    """Return a deterministic table shaped like the raw Pokemon CSV.

    Roughly one row in ten is legendary, with inflated stats, slow growth and
    no gender. Heights and weights have gaps, ``type2`` is often missing and a
    single ``capture_rate`` carries the malformed string found in the real
    data.
    """
    global SAMPLE_DATA_USED
    SAMPLE_DATA_USED = True
    rng = np.random.default_rng(seed)

    legendary = np.zeros(n_rows, dtype=int)
    n_legendary = max(2, round(n_rows * 0.1))
    legendary[rng.choice(n_rows, size=n_legendary, replace=False)] = 1

    stats = {}
    for col in ["hp", "attack", "defense", "sp_attack", "sp_defense", "speed"]:
        stats[col] = rng.integers(30, 110, size=n_rows) + legendary * 40
    base_total = sum(stats.values())

    capture_rate = np.where(
        legendary == 1, 3, rng.integers(30, 256, size=n_rows)
    ).astype(str).astype(object)
    capture_rate[rng.integers(n_rows)] = "30 (Meteorite)255 (Core)"

    height = np.round(rng.uniform(0.3, 3.0, size=n_rows) + legendary * 1.5, 1)
    weight = np.round(rng.uniform(1.0, 150.0, size=n_rows) + legendary * 200, 1)
    no_size = rng.random(n_rows) < 0.08
    no_size[rng.integers(n_rows)] = True
    height[no_size] = np.nan
    weight[no_size] = np.nan

    percentage_male = rng.choice([0.0, 12.5, 50.0, 87.5, 100.0], size=n_rows)
    genderless = (legendary == 1) | (rng.random(n_rows) < 0.05)
    percentage_male[genderless] = np.nan

    type2 = rng.choice(POKEMON_TYPES, size=n_rows).astype(object)
    type2[rng.random(n_rows) < 0.5] = np.nan

    data = {
        "abilities": ["['Pressure']" if l else "['Overgrow']" for l in legendary],
        **{
            col: rng.choice([0.25, 0.5, 1.0, 2.0, 4.0], size=n_rows)
            for col in AGAINST_COLS
        },
        "attack": stats["attack"],
        "base_egg_steps": np.where(
            legendary == 1, 30720, rng.choice([2560, 3840, 5120, 6400], size=n_rows)
        ),
        "base_happiness": np.where(legendary == 1, 0, 70),
        "base_total": base_total,
        "capture_rate": capture_rate,
        "classfication": ["Sample Pokemon"] * n_rows,
        "defense": stats["defense"],
        "experience_growth": np.where(
            legendary == 1,
            1250000,
            rng.choice([800000, 1000000, 1059860], size=n_rows),
        ),
        "height_m": height,
        "hp": stats["hp"],
        "japanese_name": [f"Sanpuru{i}" for i in range(n_rows)],
        "name": [f"sample_{i:03d}" for i in range(n_rows)],
        "percentage_male": percentage_male,
        "pokedex_number": np.arange(1, n_rows + 1),
        "sp_attack": stats["sp_attack"],
        "sp_defense": stats["sp_defense"],
        "speed": stats["speed"],
        "type1": rng.choice(POKEMON_TYPES, size=n_rows),
        "type2": type2,
        "weight_kg": weight,
        "generation": rng.integers(1, 8, size=n_rows),
        "is_legendary": legendary,
    }
    return pd.DataFrame(data)


def stratified_cv(
    y: Sequence,
    n_splits: int = 5,
    random_state: int = 42,
) -> StratifiedKFold:
    """Return a shuffled ``StratifiedKFold`` that the labels can support.

    Parameters
    ----------
    y
        Class labels. Only the class counts are used.
    n_splits
        Requested number of folds. Capped at the size of the smallest class
        so every fold holds at least one member of each class.
    random_state
        Seed for the shuffle, fixing the fold assignment.
    """
    counts = pd.Series(y).value_counts()
    if len(counts) < 2:
        raise ValueError("Cross-validation needs both classes in the labels")
    min_count = int(counts.min())
    if min_count < 2:
        raise ValueError(
            f"Smallest class has {min_count} member(s); at least 2 are needed"
        )
    n_splits = max(2, min(n_splits, min_count))
    return StratifiedKFold(n_splits=n_splits, shuffle=True, random_state=random_state)


def log_offline_mode(stage: str) -> None:
    """If sample data was used, log this fact for the given stage."""
    logger = logging.getLogger(__name__)
    if SAMPLE_DATA_USED:
        logger.info("Using generated sample data in %s stage", stage)
