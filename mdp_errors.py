"""
mdp_errors.py
-------------
Error and warning types raised by the policy-iteration pipeline.

All of them surface programming or modelling mistakes; nothing here is
meant to be caught and retried.
"""


class ConfigurationError(ValueError):
    """Invalid training parameters or an illegal/missing initial policy action."""


class ModelInconsistencyError(RuntimeError):
    """
    The transition model broke its contract: outcome probabilities that do
    not sum to 1, or a successor state outside the enumerated universe.
    """


class NonConvergenceWarning(RuntimeWarning):
    """A safety cap on sweeps or policy-iteration cycles was reached."""


class DeadEndWarning(RuntimeWarning):
    """Non-terminal states without a legal action; their values are left unchanged."""
