from __future__ import annotations

import unittest

from ephemeris.core import CreationError, NoInterpolationData, Trajectory, TrajectorySettings
from ephemeris.spacecraft import (
    EME2000,
    IAU_EARTH,
    FrameService,
    Orbit,
    OrbitConfig,
    OrbitalEvent,
    propagate,
    propagate_spacecraft,
)


def _linear_traj(start: int, stop: int, name: str, settings: TrajectorySettings | None = None) -> Trajectory[Orbit]:
    traj: Trajectory[Orbit] = Trajectory(name=name, settings=settings)
    for i in range(start, stop + 1):
        t = float(i)
        traj.append(Orbit(epoch=t, x_m=t, y_m=2.0 * t, z_m=0.0, vx_mps=1.0, vy_mps=2.0, vz_mps=0.0))
    traj.finalize()
    return traj


class MergeTests(unittest.TestCase):
    def test_merge_with_gap_warns_and_interpolates_across(self) -> None:
        left = _linear_traj(0, 10, "left")
        right = _linear_traj(20, 30, "right")
        with self.assertLogs("ephemeris.core.trajectory", level="WARNING") as logs:
            merged = left + right
        self.assertIn("time-gap of 10.000000 s", logs.output[0])
        self.assertEqual(len(merged), 22)
        self.assertEqual(merged.name, "left")
        self.assertAlmostEqual(merged.at(15.0).x_m, 15.0, places=9)

    def test_merge_is_order_independent(self) -> None:
        left = _linear_traj(0, 10, "left")
        right = _linear_traj(20, 30, "right")
        with self.assertLogs("ephemeris.core.trajectory", level="WARNING"):
            a = left + right
        with self.assertLogs("ephemeris.core.trajectory", level="WARNING"):
            b = right + left
        self.assertEqual([s.epoch for s in a], [s.epoch for s in b])
        self.assertEqual(b.name, "right")

    def test_overlapping_merge_keeps_left_duplicates(self) -> None:
        left = _linear_traj(0, 10, "left")
        right: Trajectory[Orbit] = Trajectory(name="right")
        for i in range(5, 16):
            t = float(i)
            right.append(Orbit(epoch=t, x_m=-t, y_m=0.0, z_m=0.0, vx_mps=-1.0, vy_mps=0.0, vz_mps=0.0))
        right.finalize()
        merged = left + right
        self.assertEqual(len(merged), 16)
        self.assertEqual(merged.at(7.0).x_m, 7.0)
        self.assertEqual(merged.at(12.0).x_m, -12.0)

    def test_in_place_add_merges(self) -> None:
        traj = _linear_traj(0, 5, "a")
        traj += _linear_traj(5, 10, "b")
        self.assertEqual(len(traj), 11)
        self.assertEqual(traj.last().epoch, 10.0)

    def test_max_gap_refuses_interpolation_inside_gap(self) -> None:
        settings = TrajectorySettings(max_gap_s=5.0)
        left = _linear_traj(0, 10, "left", settings=settings)
        with self.assertLogs("ephemeris.core.trajectory", level="WARNING"):
            merged = left + _linear_traj(20, 30, "right")
        with self.assertRaises(NoInterpolationData):
            merged.at(15.0)
        self.assertAlmostEqual(merged.at(5.5).x_m, 5.5, places=9)
        self.assertEqual(merged.at(20.0).x_m, 20.0)


class FrameConversionTests(unittest.TestCase):
    def _config(self) -> OrbitConfig:
        return OrbitConfig(
            sma_m=6878137.0,
            eccentricity=0.01,
            inclination_deg=51.6,
            raan_deg=40.0,
            horizon_s=1800.0,
            step_s=30.0,
        )

    def test_round_trip_recovers_original_states(self) -> None:
        traj = propagate(self._config(), name="leo")
        service = FrameService(theta0_rad=0.3)
        fixed = traj.to_frame(IAU_EARTH, service)
        back = fixed.to_frame(EME2000, service)

        n = len(traj)
        self.assertEqual(len(fixed), 2 * n - 1)
        self.assertEqual(len(back), 4 * n - 3)
        self.assertTrue(all(s.frame == IAU_EARTH for s in fixed))
        for state in traj:
            pos_err, vel_err = state.rss(back.at(state.epoch))
            self.assertLess(pos_err, 1e-3)
            self.assertLess(vel_err, 1e-6)

    def test_midpoints_are_added(self) -> None:
        traj = propagate(self._config())
        fixed = traj.to_frame(IAU_EARTH, FrameService())
        epochs = [s.epoch for s in fixed]
        self.assertEqual(epochs[1], 15.0)
        self.assertEqual(epochs[-2], traj.last().epoch - 15.0)

    def test_spacecraft_conversion_keeps_mass(self) -> None:
        traj = propagate_spacecraft(self._config(), dry_mass_kg=500.0, fuel_mass_kg=80.0)
        fixed = traj.to_frame(IAU_EARTH, FrameService())
        self.assertEqual(fixed.first().frame, IAU_EARTH)
        self.assertEqual(fixed.first().total_mass_kg, 580.0)

    def test_empty_trajectory_cannot_be_converted(self) -> None:
        with self.assertRaises(CreationError):
            Trajectory().to_frame(IAU_EARTH, FrameService())


class OrbitalEventTests(unittest.TestCase):
    def test_apsides_of_eccentric_orbit(self) -> None:
        config = OrbitConfig(sma_m=8000000.0, eccentricity=0.1, mean_anomaly0_deg=90.0, step_s=10.0)
        period = config.orbit_period_s
        config.horizon_s = 1.5 * period
        traj = propagate(config, name="eccentric")

        apoapsis = OrbitalEvent.apoapsis()
        apo_states = traj.find_all(apoapsis)
        self.assertEqual(len(apo_states), 2)
        self.assertAlmostEqual(apo_states[0].epoch, 0.25 * period, delta=1.0)
        self.assertAlmostEqual(apo_states[1].epoch, 1.25 * period, delta=1.0)
        for state in apo_states:
            self.assertLessEqual(abs(apoapsis.eval(state)), apoapsis.value_precision)

        periapsis = OrbitalEvent.periapsis()
        peri_states = traj.find_all(periapsis)
        self.assertEqual(len(peri_states), 1)
        self.assertAlmostEqual(peri_states[0].epoch, 0.75 * period, delta=1.0)
        self.assertLess(peri_states[0].rmag_m(), apo_states[0].rmag_m())

    def test_event_description(self) -> None:
        self.assertEqual(str(OrbitalEvent.apoapsis()), "true_anomaly = 180")


if __name__ == "__main__":
    unittest.main()
