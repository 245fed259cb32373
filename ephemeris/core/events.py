from __future__ import annotations

from abc import ABC, abstractmethod
import logging
import math
import sys
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Tuple, TypeVar

from joblib import Parallel, delayed

from .errors import (
    RECOVERABLE_ERRORS,
    EmptyTrajectory,
    EventEvaluationError,
    EventNotFound,
    MaxIterReached,
)
from .models import MILLISECOND_S, TrajectorySettings
from .state import InterpState

if TYPE_CHECKING:
    from .trajectory import Trajectory

logger = logging.getLogger(__name__)

_EPS = sys.float_info.epsilon

S = TypeVar("S", bound=InterpState)
T = TypeVar("T")
R = TypeVar("R")


class EventEvaluator(ABC):
    """Scalar function of a state whose zero crossings are searched for."""

    @abstractmethod
    def eval(self, state: InterpState) -> float:
        raise NotImplementedError

    @property
    def epoch_precision(self) -> float:
        return MILLISECOND_S

    @property
    def value_precision(self) -> float:
        return 1e-6

    def __str__(self) -> str:
        return type(self).__name__


class FunctionEvent(EventEvaluator):
    def __init__(
        self,
        name: str,
        fn: Callable[[InterpState], float],
        epoch_precision_s: float = MILLISECOND_S,
        value_precision: float = 1e-6,
    ) -> None:
        self.name = name
        self.fn = fn
        self._epoch_precision_s = float(epoch_precision_s)
        self._value_precision = float(value_precision)

    def eval(self, state: InterpState) -> float:
        return float(self.fn(state))

    @property
    def epoch_precision(self) -> float:
        return self._epoch_precision_s

    @property
    def value_precision(self) -> float:
        return self._value_precision

    def __str__(self) -> str:
        return self.name


def _checked_eval(event: EventEvaluator, state: InterpState) -> float:
    value = float(event.eval(state))
    if not math.isfinite(value):
        raise EventEvaluationError(float(state.epoch), event, value)
    return value


def fork_join(fn: Callable[[T], R], items: Sequence[T], settings: TrajectorySettings) -> List[R]:
    """Evaluate ``fn`` over ``items`` on a worker pool; results keep input order."""
    if settings.parallel_backend == "sequential" or settings.n_jobs == 1 or len(items) <= 1:
        return [fn(item) for item in items]
    return list(Parallel(n_jobs=settings.n_jobs, backend=settings.parallel_backend)(delayed(fn)(item) for item in items))


def find_bracketed(traj: "Trajectory[S]", start_s: float, end_s: float, event: EventEvaluator) -> S:
    """
    Brent search for the state where ``event`` crosses zero in [start_s, end_s].

    The event is assumed monotone over the bracket; this is not verified. The
    search runs on seconds elapsed since ``start_s``.
    """
    max_iter = int(traj.settings.max_iter)
    epoch_tol = abs(float(event.epoch_precision))
    value_tol = abs(float(event.value_precision))
    start_s = float(start_s)
    end_s = float(end_s)

    def has_converged(x1: float, x2: float) -> bool:
        return abs(x1 - x2) <= epoch_tol

    def arrange(a: float, ya: float, b: float, yb: float) -> Tuple[float, float, float, float]:
        # b always holds the smaller residual.
        if abs(ya) > abs(yb):
            return a, ya, b, yb
        return b, yb, a, ya

    def evaluate(x: float) -> Tuple[S, float]:
        state = traj.at(start_s + x)
        return state, _checked_eval(event, state)

    xa = 0.0
    xb = end_s - start_s
    state_a, ya = evaluate(xa)
    if abs(ya) <= value_tol:
        return state_a
    state_b, yb = evaluate(xb)
    if abs(yb) <= value_tol:
        return state_b

    xa, ya, xb, yb = arrange(xa, ya, xb, yb)
    xc, yc, xd = xa, ya, xa
    flag = True

    for _ in range(max_iter):
        if abs(ya) < value_tol:
            return traj.at(start_s + xa)
        if abs(yb) < value_tol:
            return traj.at(start_s + xb)
        if has_converged(xa, xb):
            raise EventNotFound(start_s, end_s, event)

        if abs(ya - yc) > _EPS and abs(yb - yc) > _EPS and abs(ya - yb) > _EPS:
            # Inverse quadratic interpolation
            s = (
                xa * yb * yc / ((ya - yb) * (ya - yc))
                + xb * ya * yc / ((yb - ya) * (yb - yc))
                + xc * ya * yb / ((yc - ya) * (yc - yb))
            )
        elif abs(yb - ya) > _EPS:
            # Secant
            s = xb - yb * (xb - xa) / (yb - ya)
        else:
            s = math.nan

        cond1 = (s - xb) * (s - (3.0 * xa + xb) / 4.0) > 0.0
        cond2 = flag and abs(s - xb) >= abs(xb - xc) / 2.0
        cond3 = (not flag) and abs(s - xb) >= abs(xc - xd) / 2.0
        cond4 = flag and has_converged(xb, xc)
        cond5 = (not flag) and has_converged(xc, xd)
        if cond1 or cond2 or cond3 or cond4 or cond5 or not math.isfinite(s):
            s = (xa + xb) / 2.0
            flag = True
        else:
            flag = False

        _, ys = evaluate(s)
        xd = xc
        xc = xb
        yc = yb
        if ya * ys < 0.0:
            xa, ya, xb, yb = arrange(xa, ya, s, ys)
        else:
            xa, ya, xb, yb = arrange(s, ys, xb, yb)

    raise MaxIterReached(f"Brent solver failed after {max_iter} iterations")


def find_minmax(traj: "Trajectory[S]", event: EventEvaluator, step_s: Optional[float] = None) -> Tuple[S, S]:
    """
    Dense scan for the states with the smallest and largest event value.

    Accurate only to within ``step_s`` (defaults to ``settings.minmax_step_s``).
    """
    if traj.is_empty:
        raise EmptyTrajectory("search for the event extrema")
    step = float(step_s) if step_s is not None else float(traj.settings.minmax_step_s)
    epochs = traj.every(step).epochs()
    traj.epoch_index()

    def evaluate(epoch: float) -> Tuple[float, float, S]:
        state = traj.at(epoch)
        return float(state.epoch), _checked_eval(event, state), state

    evald = fork_join(evaluate, epochs, traj.settings)
    evald.sort(key=lambda item: item[0])

    min_val = math.inf
    max_val = -math.inf
    min_state = max_state = evald[0][2]
    for _, value, state in evald:
        if value < min_val:
            min_val = value
            min_state = state
        if value > max_val:
            max_val = value
            max_state = state
    return min_state, max_state


def _dedup_by_epoch(states: List[S], tolerance_s: float) -> List[S]:
    states = sorted(states, key=lambda s: float(s.epoch))
    unique: List[S] = []
    for state in states:
        if unique and float(state.epoch) - float(unique[-1].epoch) <= tolerance_s:
            continue
        unique.append(state)
    return unique


def find_all(traj: "Trajectory[S]", event: EventEvaluator) -> List[S]:
    """
    Best-effort search for every state where ``event`` crosses zero.

    The span is cut into ``settings.find_all_divisions`` equal brackets (1% of
    the trajectory each by default) searched independently. Two crossings
    inside the same bracket, or an event period shorter than one bracket, will
    cause misses. If no bracket yields a crossing, the search falls back to a
    narrow window around the event minimum and maximum.
    """
    settings = traj.settings
    start_epoch = float(traj.first().epoch)
    end_epoch = float(traj.last().epoch)
    if start_epoch == end_epoch:
        raise EventNotFound(start_epoch, end_epoch, event)

    divisions = max(1, int(settings.find_all_divisions))
    heuristic = (end_epoch - start_epoch) / divisions
    logger.info("Searching for %s with initial heuristic of %.6f s", event, heuristic)

    brackets = [
        (start_epoch + i * heuristic, end_epoch if i == divisions - 1 else start_epoch + (i + 1) * heuristic)
        for i in range(divisions)
    ]
    # Build the epoch index once so workers only read the trajectory.
    traj.epoch_index()

    def search(bracket: Tuple[float, float]) -> Optional[S]:
        try:
            return find_bracketed(traj, bracket[0], bracket[1], event)
        except RECOVERABLE_ERRORS:
            return None

    states = [s for s in fork_join(search, brackets, settings) if s is not None]

    if not states:
        logger.warning("Heuristic failed to find any %s event, using slower approach", event)
        try:
            min_state, max_state = find_minmax(traj, event)
        except RECOVERABLE_ERRORS as exc:
            raise EventNotFound(start_epoch, end_epoch, event) from exc

        window = float(settings.fallback_window_s)
        for extremum in (min_state, max_state):
            lo = max(start_epoch, float(extremum.epoch) - window)
            hi = min(end_epoch, float(extremum.epoch) + window)
            found = search((lo, hi))
            if found is not None:
                states.append(found)

        if not states:
            raise EventNotFound(start_epoch, end_epoch, event)

    states = _dedup_by_epoch(states, abs(float(event.epoch_precision)))
    for cnt, state in enumerate(states):
        logger.info("%s #%d: %s", event, cnt + 1, state)
    return states
