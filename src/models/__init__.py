"""
NYC Shootings - Models

Components:
    - MurderClassifier: logistic regression over borough, precinct, time of day
    - split / fit / evaluate: stratified training and held-out evaluation
"""

from src.models.murder_classifier import (
    EvaluationResult,
    MurderClassifier,
    evaluate,
    fit,
    split,
    train_and_evaluate,
)

__all__ = [
    "MurderClassifier",
    "EvaluationResult",
    "split",
    "fit",
    "evaluate",
    "train_and_evaluate",
]
