from .rf_model import build_pipeline, train_rf

__all__ = [
    "build_pipeline",
    "train_rf",
]
