class SimulationError(Exception):
    """Base class for failures raised by the simulation pipeline."""


class InvalidArgumentError(SimulationError, ValueError):
    """Bad generator, augmenter or configuration parameter."""


class InsufficientDataError(SimulationError):
    """Not enough records of a class for the requested operation."""


class NonConvergenceError(SimulationError):
    """Model fit did not stabilise within the iteration bound."""

    def __init__(self, message: str, n_iter: int, deviance: float):
        super().__init__(message)
        self.n_iter = n_iter
        self.deviance = deviance
