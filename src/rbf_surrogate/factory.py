import logging
import pickle
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from .exceptions import DegenerateGeometryError
from .evaluation.metrics import generate_performance_report
from .evaluation.plotting import plot_parity
from .models.kernels import KernelType, RadialFunction, get_kernel
from .models.rbf_model import RadialBasis
from .models.storage import get_storage
from .parsers.general_parser import load_standard_format

logger = logging.getLogger(__name__)


def build(samples_x, samples_y, lower_bounds, upper_bounds,
          kernel: Union[str, KernelType, RadialFunction] = KernelType.LINEAR,
          scale_factor: float = 1.0, storage_mode="dense", **kwargs) -> RadialBasis:
    """
    Fits an RBF surrogate on scattered samples.

    Args:
        samples_x: Sample locations (scalars for 1-D inputs, tuples otherwise).
        samples_y: Sample outputs (scalars or tuples of equal length).
        lower_bounds, upper_bounds: Domain bounds, lb < ub on every axis.
        kernel: Kernel name, KernelType or RadialFunction.
        scale_factor: Positive scalar dividing every displacement.
        storage_mode: 'dense' or 'sparse'.
        **kwargs: 'degree' and 'basis_kind' forwarded to RadialBasis.

    Returns:
        A fitted RadialBasis, callable on query points.
    """
    return RadialBasis(samples_x, samples_y, lower_bounds, upper_bounds, kernel=kernel,
                       scale_factor=scale_factor, storage_mode=storage_mode, **kwargs)


def add_point(surrogate: RadialBasis, new_x, new_y):
    """Adds a single (x, y) sample to the surrogate and refits it in place."""
    surrogate.add_point(new_x, new_y)


def add_points(surrogate: RadialBasis, new_xs, new_ys):
    """Adds a sequence of (x, y) samples to the surrogate and refits it in place."""
    surrogate.add_points(new_xs, new_ys)


class SurrogateFactory:
    """
    Workflow around a single RBF surrogate: load samples, hold some out,
    fit, evaluate, predict, update and persist.
    """

    def __init__(self, kernel: Union[str, KernelType, RadialFunction] = KernelType.LINEAR,
                 scale_factor: float = 1.0, storage_mode: str = "dense"):

        self.kernel = get_kernel(kernel)
        self.scale_factor = scale_factor
        self.storage_mode = storage_mode
        get_storage(storage_mode)

        self.surrogate: Optional[RadialBasis] = None
        self.feature_names: List[str] = []

        self._X_raw = None
        self._Y_raw = None
        self.X_test = None
        self.Y_test = None

        logger.info("SurrogateFactory initialized (kernel degree=%d, scale_factor=%s, storage=%s)",
                    self.kernel.degree, scale_factor, storage_mode)

    def set_data(self, X, Y, feature_names: Optional[List[str]] = None):
        """
        Sets the samples manually.

        Args:
            X: Sample locations, shape (n, d) or (n,) for 1-D inputs.
            Y: Sample outputs, shape (n,) or (n, k).
            feature_names: Optional names of the d input columns.
        """
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        Y = np.asarray(Y, dtype=float)
        if len(X) != len(Y):
            raise ValueError(f"Got {len(X)} input points but {len(Y)} output values.")

        self._X_raw = X
        self._Y_raw = Y
        self.feature_names = list(feature_names) if feature_names else [f"x{i}" for i in range(X.shape[1])]

    def load_data(self, features_path: Union[str, Path], targets_path: Union[str, Path]):
        """
        Loads samples from the standard format (features.csv + targets.json).
        """
        features_path = Path(features_path)
        targets_path = Path(targets_path)

        try:
            X, Y, feature_names = load_standard_format(features_path=features_path, targets_path=targets_path)
        except FileNotFoundError:
            logger.error("Data files not found: '%s' or '%s'", features_path, targets_path)
            raise

        self.set_data(X, Y, feature_names)
        logger.info("Loaded %d samples with features %s", len(self._X_raw), self.feature_names)

    def train(self, lower_bounds=None, upper_bounds=None, test_size: float = 0.0, random_state: int = 42):
        """
        Splits the samples and fits the surrogate on the training part.

        Args:
            lower_bounds, upper_bounds: Domain bounds. Default to the bounding
                box of the training samples.
            test_size (float): Fraction of samples held out for evaluate().
            random_state (int): Seed of the split.
        """
        if self._X_raw is None:
            raise RuntimeError("No data loaded, call load_data() or set_data() first")

        if test_size > 0.0:
            train_idx, test_idx = train_test_split(
                np.arange(len(self._X_raw)),
                test_size=test_size,
                random_state=random_state
            )
        else:
            train_idx, test_idx = np.arange(len(self._X_raw)), np.array([], dtype=int)

        X_train, Y_train = self._X_raw[train_idx], self._Y_raw[train_idx]
        self.X_test, self.Y_test = self._X_raw[test_idx], self._Y_raw[test_idx]
        logger.info("%d training samples, %d held out", len(train_idx), len(test_idx))

        if lower_bounds is None:
            lower_bounds = X_train.min(axis=0)
        if upper_bounds is None:
            upper_bounds = X_train.max(axis=0)
        flat_axes = np.flatnonzero(np.asarray(upper_bounds) - np.asarray(lower_bounds) <= 0.0)
        if flat_axes.size:
            raise DegenerateGeometryError(f"The sample bounding box has zero width along axes {flat_axes.tolist()}")

        self.surrogate = build(
            X_train, Y_train, lower_bounds, upper_bounds,
            kernel=self.kernel,
            scale_factor=self.scale_factor,
            storage_mode=self.storage_mode
        )

    def _require_surrogate(self) -> RadialBasis:
        if self.surrogate is None:
            raise RuntimeError("No surrogate trained. Call .train() or .load_model()")
        return self.surrogate

    def _to_array(self, X_new) -> np.ndarray:
        if isinstance(X_new, pd.DataFrame):
            try:
                X_new = X_new[self.feature_names]
            except KeyError:
                raise ValueError(f"Input DataFrame is missing feature columns. Expected: {self.feature_names}")
            return X_new.to_numpy(dtype=float)
        return np.asarray(X_new, dtype=float)

    def predict(self, X_new) -> np.ndarray:
        """
        Predicts a batch of points.

        Args:
            X_new: DataFrame with the training feature columns, or an array (m, d).

        Returns:
            np.ndarray of shape (m, k).
        """
        surrogate = self._require_surrogate()
        return surrogate.predict_values(self._to_array(X_new))

    def evaluate(self) -> Dict[str, float]:
        """Accuracy metrics on the held-out samples (empty when nothing was held out)."""
        surrogate = self._require_surrogate()
        if self.X_test is None or len(self.X_test) == 0:
            logger.warning("No held-out samples, skipping evaluation")
            return {}

        y_pred = surrogate.predict_values(self.X_test)
        y_true = self.Y_test.reshape(y_pred.shape)
        report = generate_performance_report(y_true, y_pred)
        logger.info("Hold-out metrics: %s", report)
        return report

    def evaluate_and_plot(self, plot_prefix: str = "surrogate_parity") -> Dict[str, float]:
        report = self.evaluate()
        if not report:
            return report
        y_pred = self.surrogate.predict_values(self.X_test)
        plot_parity(self.Y_test.reshape(y_pred.shape), y_pred, save_path=f"{plot_prefix}.png")
        return report

    def add_samples(self, new_xs, new_ys):
        """Adds new samples (a sequence of pairs) and refits the surrogate."""
        surrogate = self._require_surrogate()
        add_points(surrogate, self._to_array(new_xs), new_ys)

    def save_model(self, file_path: Union[str, Path]):
        """
        Saves the factory with its fitted surrogate.
        """
        file_path = Path(file_path)
        logger.info("Saving model to %s", file_path)

        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'wb') as f:
            pickle.dump(self, f)

    @classmethod
    def load_model(cls, file_path: Union[str, Path]):
        """
        Loads a factory saved by save_model.
        """
        file_path = Path(file_path)
        logger.info("Loading model from %s", file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Model file not found: {file_path}")
        with open(file_path, 'rb') as f:
            loaded_object = pickle.load(f)
        if not isinstance(loaded_object, cls):
            raise TypeError(f"The loaded file is not an instance of {cls.__name__}")

        return loaded_object
