from __future__ import annotations

import math
import random

import pytest

from ephemeris.core import EmptyTrajectory, NoInterpolationData, StateParameter, Trajectory
from ephemeris.spacecraft import Orbit


def _cubic_orbit(t: float) -> Orbit:
    # x(t) = t^3 - 2t, y(t) = 5t, z(t) = -t^2
    return Orbit(
        epoch=t,
        x_m=t ** 3 - 2.0 * t,
        y_m=5.0 * t,
        z_m=-(t ** 2),
        vx_mps=3.0 * t ** 2 - 2.0,
        vy_mps=5.0,
        vz_mps=-2.0 * t,
    )


def _cubic_traj(n: int = 11) -> Trajectory[Orbit]:
    traj: Trajectory[Orbit] = Trajectory(name="cubic")
    for i in range(n):
        traj.append(_cubic_orbit(float(i)))
    traj.finalize()
    return traj


def test_exact_hit_returns_stored_state() -> None:
    traj = _cubic_traj()
    for state in traj.states:
        assert traj.at(state.epoch) == state


def test_query_outside_range_fails() -> None:
    traj = _cubic_traj()
    for epoch in (-1e-9, -5.0, 10.0 + 1e-9, 1e6):
        with pytest.raises(NoInterpolationData):
            traj.at(epoch)


def test_empty_trajectory_fails_fast() -> None:
    traj: Trajectory[Orbit] = Trajectory()
    with pytest.raises(NoInterpolationData):
        traj.at(0.0)
    with pytest.raises(EmptyTrajectory):
        traj.first()
    with pytest.raises(EmptyTrajectory):
        traj.last()
    assert str(traj) == "Trajectory (empty)"


def test_interpolation_reproduces_cubic_motion() -> None:
    traj = _cubic_traj()
    for t in (0.25, 4.5, 7.3, 9.9):
        state = traj.at(t)
        expected = _cubic_orbit(t)
        assert state.epoch == t
        assert state.x_m == pytest.approx(expected.x_m, rel=1e-10, abs=1e-9)
        assert state.vx_mps == pytest.approx(expected.vx_mps, rel=1e-10, abs=1e-9)
        assert state.z_m == pytest.approx(expected.z_m, rel=1e-10, abs=1e-9)
        assert state.vy_mps == pytest.approx(5.0, abs=1e-9)


def test_finalize_sorts_out_of_order_appends() -> None:
    states = [_cubic_orbit(float(i)) for i in range(20)]
    random.Random(7).shuffle(states)
    traj: Trajectory[Orbit] = Trajectory(states)
    traj.finalize()
    assert [s.epoch for s in traj.states] == [float(i) for i in range(20)]
    assert traj.first().epoch == 0.0
    assert traj.last().epoch == 19.0


def test_finalize_is_idempotent() -> None:
    states = [_cubic_orbit(float(i % 7)) for i in range(15)]
    traj: Trajectory[Orbit] = Trajectory(states)
    traj.finalize()
    once = traj.states
    traj.finalize()
    assert traj.states == once


def test_duplicate_epochs_collapse_to_first_appended() -> None:
    traj: Trajectory[Orbit] = Trajectory()
    first = _cubic_orbit(3.0)
    second = Orbit(epoch=3.0, x_m=1.0, y_m=2.0, z_m=3.0, vx_mps=0.0, vy_mps=0.0, vz_mps=0.0)
    traj.append(_cubic_orbit(5.0))
    traj.append(first)
    traj.append(second)
    traj.finalize()
    assert len(traj) == 2
    assert traj.at(3.0) is first


def test_short_trajectory_uses_every_sample() -> None:
    traj = _cubic_traj(n=2)
    state = traj.at(0.5)
    # Two samples still determine a cubic Hermite segment.
    assert state.x_m == pytest.approx(_cubic_orbit(0.5).x_m, abs=1e-10)


def test_query_near_the_end_shifts_window_left() -> None:
    traj = _cubic_traj(n=30)
    state = traj.at(28.75)
    assert state.x_m == pytest.approx(_cubic_orbit(28.75).x_m, rel=1e-10)


def test_every_is_inclusive_and_restartable() -> None:
    traj = _cubic_traj()
    series = traj.every(2.5)
    first_pass = [s.epoch for s in series]
    second_pass = [s.epoch for s in series]
    assert first_pass == [0.0, 2.5, 5.0, 7.5, 10.0]
    assert second_pass == first_pass
    assert len(series) == 5


def test_every_between_stays_inside_bounds() -> None:
    traj = _cubic_traj()
    assert [s.epoch for s in traj.every(3.0)] == [0.0, 3.0, 6.0, 9.0]
    assert [s.epoch for s in traj.every_between(1.0, 2.0, 4.0)] == [2.0, 3.0, 4.0]
    epochs = [s.epoch for s in traj.every_between(0.1, 0.0, 1.0)]
    assert len(epochs) == 11
    assert epochs[-1] == pytest.approx(1.0)
    with pytest.raises(ValueError):
        traj.every(0.0)


def test_appending_after_finalize_is_queryable_after_refinalize() -> None:
    traj = _cubic_traj()
    traj.append(_cubic_orbit(12.0))
    traj.append(_cubic_orbit(11.0))
    traj.finalize()
    assert traj.last().epoch == 12.0
    assert traj.at(11.5).x_m == pytest.approx(_cubic_orbit(11.5).x_m, rel=1e-10)


def test_display_summarizes_name_span_and_count() -> None:
    traj = _cubic_traj()
    text = str(traj)
    assert text.startswith("Trajectory[cubic] from 0.000000 s to 10.000000 s")
    assert "[11 states]" in text
    assert math.isclose(traj.duration_s, 10.0)


def test_copy_is_independent_of_source() -> None:
    traj = _cubic_traj()
    clone = traj.copy()
    clone.extend([_cubic_orbit(11.0), _cubic_orbit(12.0)])
    clone.finalize()
    assert len(traj) == 11
    assert len(clone) == 13
    assert clone.name == traj.name
    assert clone.settings is traj.settings
    assert traj.last().epoch == 10.0


def test_epoch_index_tracks_appends() -> None:
    traj = _cubic_traj(n=3)
    assert traj.epoch_index() == [0.0, 1.0, 2.0]
    traj.append(_cubic_orbit(3.0))
    assert traj.epoch_index() == [0.0, 1.0, 2.0, 3.0]


def test_interpolated_derivative_is_velocity() -> None:
    state = _cubic_traj().at(4.5)
    assert state.deriv(StateParameter.X) == state.vx_mps
    assert state.deriv(StateParameter.Z) == pytest.approx(-9.0, abs=1e-9)
