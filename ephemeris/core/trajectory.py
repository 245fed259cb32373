from __future__ import annotations

from bisect import bisect_left
import logging
import math
import time
from typing import Any, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

from .errors import CreationError, EmptyTrajectory, NoInterpolationData, TrajectoryError
from .events import EventEvaluator, find_all, find_bracketed, find_minmax
from .models import DEFAULT_SETTINGS, TrajectorySettings
from .state import InterpState

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=InterpState)


class TrajectoryIterator(Generic[S]):
    """Restartable inclusive time series over a trajectory, one ``at()`` per step."""

    def __init__(self, traj: "Trajectory[S]", step_s: float, start_s: float, end_s: float) -> None:
        if not step_s > 0.0 or not math.isfinite(step_s):
            raise ValueError(f"step must be a positive finite duration, got {step_s}")
        self.traj = traj
        self.step_s = float(step_s)
        self.start_s = float(start_s)
        self.end_s = float(end_s)

    def epochs(self) -> List[float]:
        if self.end_s < self.start_s:
            return []
        # Tolerate rounding so a step that divides the span lands on the end epoch.
        n_steps = int(math.floor((self.end_s - self.start_s) / self.step_s + 1e-9))
        return [min(self.start_s + i * self.step_s, self.end_s) for i in range(n_steps + 1)]

    def __iter__(self) -> Iterator[S]:
        for epoch in self.epochs():
            yield self.traj.at(epoch)

    def __len__(self) -> int:
        return len(self.epochs())


class Trajectory(Generic[S]):
    """
    Ordered store of time-tagged states with Hermite interpolation between them.

    States may be appended in any order; ``finalize()`` sorts them and drops
    duplicate epochs. Queries assume a finalized trajectory that is not being
    appended to concurrently.
    """

    def __init__(
        self,
        states: Optional[Iterable[S]] = None,
        name: Optional[str] = None,
        settings: Optional[TrajectorySettings] = None,
    ) -> None:
        self.name = name
        self.settings = settings or DEFAULT_SETTINGS
        self._states: List[S] = list(states) if states is not None else []
        self._epochs: Optional[List[float]] = None

    @property
    def states(self) -> Tuple[S, ...]:
        return tuple(self._states)

    @property
    def is_empty(self) -> bool:
        return len(self._states) == 0

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[S]:
        return iter(list(self._states))

    def append(self, state: S) -> None:
        self._states.append(state)
        self._epochs = None

    def extend(self, states: Iterable[S]) -> None:
        self._states.extend(states)
        self._epochs = None

    def copy(self) -> "Trajectory[S]":
        return Trajectory(self._states, name=self.name, settings=self.settings)

    def finalize(self) -> None:
        # sorted() is stable, so the first appended state wins on equal epochs.
        ordered = sorted(self._states, key=lambda s: float(s.epoch))
        deduped: List[S] = []
        for state in ordered:
            if deduped and float(deduped[-1].epoch) == float(state.epoch):
                continue
            deduped.append(state)
        self._states = deduped
        self._epochs = [float(s.epoch) for s in deduped]

    def epoch_index(self) -> List[float]:
        """Sorted sample epochs, cached until the next append or finalize."""
        epochs = self._epochs
        if epochs is None:
            epochs = [float(s.epoch) for s in self._states]
            self._epochs = epochs
        return epochs

    def first(self) -> S:
        if not self._states:
            raise EmptyTrajectory("get the first state")
        return self._states[0]

    def last(self) -> S:
        if not self._states:
            raise EmptyTrajectory("get the last state")
        return self._states[-1]

    @property
    def duration_s(self) -> float:
        return float(self.last().epoch) - float(self.first().epoch)

    def at(self, epoch: float) -> S:
        epoch = float(epoch)
        if not self._states:
            raise NoInterpolationData(epoch, "trajectory is empty")
        epochs = self.epoch_index()
        if epoch < epochs[0] or epoch > epochs[-1] or math.isnan(epoch):
            raise NoInterpolationData(epoch, f"outside [{epochs[0]:.6f}, {epochs[-1]:.6f}]")

        idx = bisect_left(epochs, epoch)
        if idx < len(epochs) and epochs[idx] == epoch:
            return self._states[idx]
        if idx == 0 or idx >= len(epochs):
            raise NoInterpolationData(epoch, "insertion point at trajectory boundary")

        max_gap = self.settings.max_gap_s
        if max_gap is not None and epochs[idx] - epochs[idx - 1] > max_gap:
            raise NoInterpolationData(
                epoch,
                f"inside a {epochs[idx] - epochs[idx - 1]:.3f} s gap (max {max_gap:.3f} s)",
            )

        n_samples = max(2, int(self.settings.interpolation_samples))
        first_idx = max(0, idx - n_samples // 2)
        last_idx = min(len(epochs), first_idx + n_samples)
        if last_idx == len(epochs):
            first_idx = max(0, last_idx - n_samples)
        window = self._states[first_idx:last_idx]

        if epoch - epochs[idx - 1] <= epochs[idx] - epoch:
            anchor = self._states[idx - 1]
        else:
            anchor = self._states[idx]
        return anchor.interpolate(epoch, window)

    def every(self, step_s: float) -> TrajectoryIterator[S]:
        return self.every_between(step_s, float(self.first().epoch), float(self.last().epoch))

    def every_between(self, step_s: float, start_s: float, end_s: float) -> TrajectoryIterator[S]:
        return TrajectoryIterator(self, step_s, start_s, end_s)

    def find_bracketed(self, start_s: float, end_s: float, event: EventEvaluator) -> S:
        return find_bracketed(self, start_s, end_s, event)

    def find_all(self, event: EventEvaluator) -> List[S]:
        return find_all(self, event)

    def find_minmax(self, event: EventEvaluator, step_s: Optional[float] = None) -> Tuple[S, S]:
        return find_minmax(self, event, step_s)

    def __add__(self, other: "Trajectory[S]") -> "Trajectory[S]":
        if not isinstance(other, Trajectory):
            return NotImplemented
        if self._states and other._states:
            if float(self.first().epoch) <= float(other.first().epoch):
                first, second = self, other
            else:
                first, second = other, self
            gap = float(second.first().epoch) - float(first.last().epoch)
            if gap > self.settings.gap_tolerance_s:
                logger.warning(
                    "Resulting merged trajectory will have a time-gap of %.6f s starting at %.6f s",
                    gap,
                    float(first.last().epoch),
                )
        merged = self.copy()
        merged.extend(other._states)
        merged.finalize()
        return merged

    def to_frame(self, frame: Any, frame_service: Any) -> "Trajectory[S]":
        """
        Re-express every state in ``frame`` through ``frame_service.convert``.

        A state interpolated in the original frame is also inserted halfway
        between every pair of consecutive states: the conversion is nonlinear
        in time and the original grid alone would under-sample the result.
        """
        if not self._states:
            raise CreationError("No trajectory to convert")
        start = time.perf_counter()
        converted: List[S] = []
        for prev_state, next_state in zip(self._states[:-1], self._states[1:]):
            converted.append(frame_service.convert(prev_state, frame))
            mid_epoch = float(prev_state.epoch) + 0.5 * (float(next_state.epoch) - float(prev_state.epoch))
            try:
                intermediate = self.at(mid_epoch)
            except TrajectoryError as exc:
                logger.error("%s @ %.6f s", exc, mid_epoch)
                continue
            converted.append(frame_service.convert(intermediate, frame))
        converted.append(frame_service.convert(self._states[-1], frame))

        traj = Trajectory(converted, name=self.name, settings=self.settings)
        traj.finalize()
        logger.info(
            "Converted trajectory from %s to %s in %.1f ms: %s",
            getattr(self.first(), "frame", "?"),
            frame,
            (time.perf_counter() - start) * 1000.0,
            traj,
        )
        return traj

    def __str__(self) -> str:
        label = f"Trajectory[{self.name}]" if self.name else "Trajectory"
        if not self._states:
            return f"{label} (empty)"
        t0 = float(self.first().epoch)
        t1 = float(self.last().epoch)
        return f"{label} from {t0:.6f} s to {t1:.6f} s ({t1 - t0:.3f} s) [{len(self._states)} states]"

    def __repr__(self) -> str:
        return f"<{self}>"

