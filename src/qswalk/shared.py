#! /usr/bin/env python
"""Shared objects."""
import json
from pathlib import Path
from types import SimpleNamespace
from typing import Optional


class Default(float):
    """Default value class.

    Extends float with the `Default.details` member.
    """

    details: SimpleNamespace
    """Details (e.g. description) of the default."""

    def __new__(cls, details: dict):  # noqa D102
        details = dict(details)
        obj = super().__new__(cls, details.pop("value"))
        obj.details = SimpleNamespace(**details)
        return obj

    @staticmethod
    def fromjson(json_file: Path) -> SimpleNamespace:
        """Read all defaults from the JSON file.

        Args:
            json_file (Path)

        Returns:
            SimpleNamespace: A namespace containing all defaults.
        """
        with open(json_file, encoding="utf-8") as f:
            data = json.load(f)
        return SimpleNamespace(**{k: Default(v) for k, v in data.items()})


DATA_DIR = Path(__file__).parent / "data"
defaults = Default.fromjson(DATA_DIR / "defaults.json")


def check_epsilon(epsilon: Optional[float]) -> float:
    """Resolve and validate a connectivity threshold.

    Args:
        epsilon (float or None): Threshold supplied by the caller,
            `None` selects `defaults.epsilon`.

    Returns:
        float: The threshold to use.

    >>> check_epsilon(None) == defaults.epsilon
    True
    >>> check_epsilon(-1.0)
    Traceback (most recent call last):
    ...
    ValueError: epsilon needs to be nonnegative, got -1.0
    """
    if epsilon is None:
        return float(defaults.epsilon)
    if not epsilon >= 0:
        raise ValueError(f"epsilon needs to be nonnegative, got {epsilon}")
    return float(epsilon)
