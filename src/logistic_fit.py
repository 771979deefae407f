from __future__ import annotations

import warnings
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.special import expit, log_expit
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import LogisticRegression

from errors import InsufficientDataError, InvalidArgumentError, NonConvergenceError

MAX_ITER = 25
TOL = 1e-8


@dataclass
class FittedLogit:
    coef: np.ndarray       # intercept, slope_X1, slope_X2
    converged: bool
    n_iter: int
    deviance: float

    @property
    def intercept(self) -> float:
        return float(self.coef[0])

    @property
    def slope_x1(self) -> float:
        return float(self.coef[1])

    @property
    def slope_x2(self) -> float:
        return float(self.coef[2])

    def predict_proba(self, x1, x2) -> np.ndarray:
        eta = self.coef[0] + self.coef[1] * np.asarray(x1, dtype=float) + self.coef[2] * np.asarray(x2, dtype=float)
        return expit(eta)

    def predict(self, x1, x2, threshold: float = 0.5) -> np.ndarray:
        return (self.predict_proba(x1, x2) >= threshold).astype(int)


def _deviance(y: np.ndarray, eta: np.ndarray) -> float:
    return float(-2.0 * np.sum(y * log_expit(eta) + (1.0 - y) * log_expit(-eta)))


def fit_logistic(data: pd.DataFrame, max_iter: int = MAX_ITER, tol: float = TOL) -> FittedLogit:
    """
    Unpenalised maximum-likelihood fit of
    logit(P(Y=1)) = b0 + b1*X1 + b2*X2.

    Uses LogisticRegression with C=inf and the newton-cholesky solver
    (Newton-Raphson on the binomial log-likelihood). The solver stops when
    the largest absolute gradient of the mean log-loss is <= tol, with at
    most max_iter Newton steps (25 and 1e-8 by default). Any
    ConvergenceWarning raised during the fit becomes NonConvergenceError.
    """
    if len(data) == 0:
        raise InvalidArgumentError("Cannot fit a logistic model to an empty dataset.")
    if max_iter < 1:
        raise InvalidArgumentError("max_iter must be >= 1.")

    y = data["Y"].to_numpy().astype(int)
    if np.all(y == y[0]):
        raise InsufficientDataError("Logistic fit needs both classes present.")

    X = data[["X1", "X2"]].to_numpy(dtype=float)
    model = LogisticRegression(C=np.inf, solver="newton-cholesky", tol=tol, max_iter=max_iter)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", ConvergenceWarning)
        model.fit(X, y)

    coef = np.concatenate([model.intercept_, model.coef_.ravel()])
    dev = _deviance(y, model.decision_function(X))
    n_iter = int(np.max(model.n_iter_))
    problems = []
    for w in caught:
        if issubclass(w.category, ConvergenceWarning):
            problems.append(str(w.message))
        else:
            warnings.warn_explicit(w.message, w.category, w.filename, w.lineno)
    if problems:
        raise NonConvergenceError(
            f"Logistic fit did not converge in {n_iter} iterations (deviance={dev:.6g}): {problems[-1]}",
            n_iter=n_iter,
            deviance=dev,
        )

    return FittedLogit(coef=coef, converged=True, n_iter=n_iter, deviance=dev)
