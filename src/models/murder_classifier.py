"""
NYC Shootings - Murder Classifier

Logistic regression predicting whether a shooting incident is flagged as a
murder, from borough, precinct and time of day.

- split(): stratified, seeded train/test partition
- fit(): one-hot encoding learned from the training partition + LogisticRegression
- evaluate(): accuracy and confusion-matrix metrics on the held-out partition

Categories never seen in training are encoded as an all-zero one-hot block,
i.e. they fall back to the model's baseline for that predictor.

Usage:
    train, test = split(features, train_fraction=0.8, seed=42)
    classifier = fit(train)
    metrics = evaluate(classifier, test)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import (
    accuracy_score,
    confusion_matrix,
    f1_score,
    precision_score,
    recall_score,
    roc_auc_score,
)
from sklearn.model_selection import train_test_split
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder

from src.shared.config import Settings, get_config

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    """Classifier performance on a held-out partition."""

    n_samples: int
    accuracy: float
    precision: float
    recall: float
    f1: float
    baseline_accuracy: float
    true_negatives: int
    false_positives: int
    false_negatives: int
    true_positives: int
    positive_rate: float
    roc_auc: float | None = None
    unseen_categories: dict[str, int] = field(default_factory=dict)
    rows_with_unseen: int = 0

    @property
    def confusion(self) -> np.ndarray:
        """Confusion matrix as [[tn, fp], [fn, tp]]."""
        return np.array(
            [
                [self.true_negatives, self.false_positives],
                [self.false_negatives, self.true_positives],
            ]
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "n_samples": self.n_samples,
            "accuracy": self.accuracy,
            "precision": self.precision,
            "recall": self.recall,
            "f1": self.f1,
            "roc_auc": self.roc_auc,
            "baseline_accuracy": self.baseline_accuracy,
            "true_negatives": self.true_negatives,
            "false_positives": self.false_positives,
            "false_negatives": self.false_negatives,
            "true_positives": self.true_positives,
            "positive_rate": self.positive_rate,
            "unseen_categories": self.unseen_categories,
            "rows_with_unseen": self.rows_with_unseen,
        }


class MurderClassifier:
    """
    Binary logistic model over categorical predictors.

    The one-hot domain of every predictor is learned from the training rows
    only and exposed as ``domains_`` after fitting.
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the classifier.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()
        self.predictors = list(self.config.features.predictors)
        self.target = self.config.features.target
        self.pipeline: Pipeline | None = None
        self.domains_: dict[str, tuple[str, ...]] = {}

    def _design_matrix(self, df: pd.DataFrame) -> pd.DataFrame:
        missing = set(self.predictors) - set(df.columns)
        if missing:
            raise ValueError(f"Missing predictor columns: {sorted(missing)}")
        return df[self.predictors].astype(str)

    def _check_fitted(self) -> Pipeline:
        if self.pipeline is None:
            raise RuntimeError("MurderClassifier is not fitted yet; call fit() first")
        return self.pipeline

    def fit(self, train: pd.DataFrame) -> MurderClassifier:
        """
        Fit encoder and logistic regression on the training partition.

        Args:
            train: Feature rows with predictors and the target

        Returns:
            self
        """
        X = self._design_matrix(train)
        y = train[self.target].astype(bool)

        if y.nunique() < 2:
            raise ValueError("Training set must contain both murder and non-murder incidents")

        model = self.config.model
        self.pipeline = Pipeline(
            [
                (
                    "encode",
                    OneHotEncoder(handle_unknown=model.unseen_category, sparse_output=False),
                ),
                (
                    "model",
                    LogisticRegression(max_iter=model.max_iter, random_state=model.seed),
                ),
            ]
        )
        self.pipeline.fit(X, y)

        encoder: OneHotEncoder = self.pipeline.named_steps["encode"]
        self.domains_ = {
            col: tuple(str(c) for c in cats)
            for col, cats in zip(self.predictors, encoder.categories_, strict=True)
        }

        logger.info(
            f"Fitted murder classifier on {len(train)} rows, {y.mean():.1%} positive",
            extra={
                "rows_train": len(train),
                "domain_sizes": {k: len(v) for k, v in self.domains_.items()},
            },
        )

        return self

    def unseen_counts(self, df: pd.DataFrame) -> tuple[dict[str, int], int]:
        """
        Count values outside the training domain.

        Returns:
            (per-predictor count of unseen values, rows with any unseen value)
        """
        self._check_fitted()
        X = self._design_matrix(df)
        unseen = pd.DataFrame(
            {col: ~X[col].isin(self.domains_[col]) for col in self.predictors},
            index=X.index,
        )
        per_column = {col: int(unseen[col].sum()) for col in self.predictors}
        return per_column, int(unseen.any(axis=1).sum())

    def predict_proba(self, df: pd.DataFrame) -> np.ndarray:
        """Probability that each row is a murder."""
        pipeline = self._check_fitted()
        classes = list(pipeline.classes_)
        return pipeline.predict_proba(self._design_matrix(df))[:, classes.index(True)]

    def predict(self, df: pd.DataFrame) -> np.ndarray:
        """Predicted murder flag for each row."""
        pipeline = self._check_fitted()
        return pipeline.predict(self._design_matrix(df)).astype(bool)

    def coefficients(self) -> pd.Series:
        """Log-odds weight of every one-hot feature, largest magnitude first."""
        pipeline = self._check_fitted()
        encoder: OneHotEncoder = pipeline.named_steps["encode"]
        model: LogisticRegression = pipeline.named_steps["model"]
        names = encoder.get_feature_names_out(self.predictors)
        coefs = pd.Series(model.coef_[0], index=names, name="coefficient")
        return coefs.reindex(coefs.abs().sort_values(ascending=False).index)


# =============================================================================
# Train / Evaluate
# =============================================================================


def split(
    features: pd.DataFrame,
    train_fraction: float | None = None,
    seed: int | None = None,
    config: Settings | None = None,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Stratified train/test split on the murder flag.

    Both partitions keep the label proportions of the input, keep the input
    order of their rows, and together cover every input row exactly once.

    Args:
        features: Feature rows indexed by incident_key
        train_fraction: Share of rows for training (default from config)
        seed: Random seed (default from config)
        config: Configuration object

    Returns:
        (train, test)
    """
    config = config or get_config()
    train_fraction = config.model.train_fraction if train_fraction is None else train_fraction
    seed = config.model.seed if seed is None else seed
    target = config.features.target

    if not 0.0 < train_fraction < 1.0:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")

    labels = features[target].astype(bool)
    class_counts = labels.value_counts()
    if len(class_counts) < 2 or class_counts.min() < 2:
        raise ValueError(
            "Stratified split needs at least 2 rows of each class, "
            f"got {class_counts.to_dict()}"
        )

    positions = np.arange(len(features))
    train_pos, test_pos = train_test_split(
        positions,
        train_size=train_fraction,
        random_state=seed,
        shuffle=True,
        stratify=labels.to_numpy(),
    )

    train = features.iloc[np.sort(train_pos)]
    test = features.iloc[np.sort(test_pos)]

    logger.info(
        f"Split {len(features)} rows into {len(train)} train / {len(test)} test",
        extra={
            "rows_train": len(train),
            "rows_test": len(test),
            "positive_rate_train": float(train[target].mean()),
            "positive_rate_test": float(test[target].mean()),
            "seed": seed,
        },
    )

    return train, test


def fit(train: pd.DataFrame, config: Settings | None = None) -> MurderClassifier:
    """Fit a MurderClassifier on the training partition."""
    return MurderClassifier(config).fit(train)


def evaluate(classifier: MurderClassifier, test: pd.DataFrame) -> EvaluationResult:
    """
    Evaluate a fitted classifier on the held-out partition.

    Args:
        classifier: Fitted MurderClassifier
        test: Held-out feature rows

    Returns:
        EvaluationResult
    """
    if len(test) == 0:
        raise ValueError("Cannot evaluate on an empty test set")

    y_true = test[classifier.target].astype(bool).to_numpy()
    y_pred = classifier.predict(test)
    proba = classifier.predict_proba(test)

    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[False, True]).ravel()
    positive_rate = float(y_true.mean())

    unseen, rows_with_unseen = classifier.unseen_counts(test)
    if rows_with_unseen:
        logger.warning(
            f"{rows_with_unseen} test rows carry categories unseen in training",
            extra={"unseen_categories": unseen},
        )

    result = EvaluationResult(
        n_samples=len(test),
        accuracy=float(accuracy_score(y_true, y_pred)),
        precision=float(precision_score(y_true, y_pred, zero_division=0)),
        recall=float(recall_score(y_true, y_pred, zero_division=0)),
        f1=float(f1_score(y_true, y_pred, zero_division=0)),
        roc_auc=float(roc_auc_score(y_true, proba)) if len(set(y_true)) > 1 else None,
        baseline_accuracy=max(positive_rate, 1.0 - positive_rate),
        true_negatives=int(tn),
        false_positives=int(fp),
        false_negatives=int(fn),
        true_positives=int(tp),
        positive_rate=positive_rate,
        unseen_categories=unseen,
        rows_with_unseen=rows_with_unseen,
    )

    logger.info(
        f"Murder classifier accuracy {result.accuracy:.3f} "
        f"(baseline {result.baseline_accuracy:.3f}) on {len(test)} rows",
        extra=result.to_dict(),
    )

    return result


def train_and_evaluate(
    features: pd.DataFrame,
    config: Settings | None = None,
) -> tuple[MurderClassifier, EvaluationResult, pd.DataFrame, pd.DataFrame]:
    """
    Convenience function: split, fit and evaluate with configured defaults.

    Returns:
        (classifier, evaluation, train, test)
    """
    config = config or get_config()
    train, test = split(features, config=config)
    classifier = fit(train, config)
    return classifier, evaluate(classifier, test), train, test
