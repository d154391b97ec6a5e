"""Exception hierarchy for trackway.

Every error message starts with a bracketed error code (``[E2001]``) so that
failures can be matched in logs and looked up quickly, followed by a short
``Fix:`` hint when there is an obvious remedy.

Codes
-----
E2001 : Unknown option value (model, superposition, origin permutation, H1).
E2002 : Hypothesis test requested without an alternative hypothesis (H1).
E2003 : Metric results built from different numbers of simulations.
E2004 : Trajectory sets that do not match (names or counts).
E2005 : Missing or malformed custom origin-permutation area.
E2006 : Invalid number of simulations.
E2007 : Untested metric result where a tested one is required.
E2008 : Invalid subset indices.
E2101 : Too few points to fit a movement model.
E2201 : Violated data invariant (malformed trajectory, empty track, ...).
"""

from __future__ import annotations


class TrackwayError(Exception):
    """Base class for all trackway errors."""


class ConfigurationError(TrackwayError, ValueError):
    """Raised when call arguments are inconsistent or invalid.

    Inherits from `ValueError` so that callers catching the built-in keep
    working.

    Parameters
    ----------
    message : str
        Human-readable description of the problem.
    error_code : str, default="E2001"
        Error code prefixed to the message.

    Examples
    --------
    >>> from trackway.errors import ConfigurationError
    >>> raise ConfigurationError("bad value", error_code="E2001")
    Traceback (most recent call last):
        ...
    trackway.errors.ConfigurationError: [E2001] bad value
    """

    def __init__(self, message: str, error_code: str = "E2001") -> None:
        self.error_code = error_code
        super().__init__(f"[{error_code}] {message}")


class InsufficientDataError(TrackwayError, ValueError):
    """Raised when a trajectory is too short to fit a movement model.

    A movement model needs at least three turning angles, i.e. four points,
    to estimate the dispersion of turning angles and step lengths.

    Parameters
    ----------
    trajectory_name : str
        Name of the offending trajectory.
    n_points : int
        Number of points the trajectory has.
    min_points : int, default=4
        Number of points required.
    """

    def __init__(self, trajectory_name: str, n_points: int, min_points: int = 4) -> None:
        self.error_code = "E2101"
        self.trajectory_name = trajectory_name
        self.n_points = n_points
        self.min_points = min_points
        message = (
            f"[{self.error_code}] Trajectory '{trajectory_name}' has {n_points} "
            f"point(s); at least {min_points} are needed to estimate step-length "
            f"and turning-angle dispersion.\n"
            f"Fix: remove short trajectories first, e.g. with "
            f"trackway.track.subset_track()."
        )
        super().__init__(message)


class InvariantError(TrackwayError, RuntimeError):
    """Raised when input data violates a structural invariant.

    Parameters
    ----------
    message : str
        Description of the violated invariant.
    error_code : str, default="E2201"
        Error code prefixed to the message.
    """

    def __init__(self, message: str, error_code: str = "E2201") -> None:
        self.error_code = error_code
        super().__init__(f"[{error_code}] {message}")
