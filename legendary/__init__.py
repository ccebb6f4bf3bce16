"""Legendary Pokemon classifier.

The package does not import its submodules at import time so that
``import legendary`` stays cheap. Import what you need directly, e.g.::

    from legendary import training
    training.train_models("data/pokemon.csv")
"""

__all__: list[str] = []
