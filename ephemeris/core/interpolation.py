from __future__ import annotations

from typing import Sequence, TypeVar

import numpy as np
from scipy.interpolate import KroghInterpolator

from .errors import NoInterpolationData
from .state import InterpState

S = TypeVar("S", bound=InterpState)


def hermite_interpolate(anchor: S, epoch: float, window: Sequence[S]) -> S:
    """
    Rebuild ``anchor`` at ``epoch`` from the values and first derivatives of
    every interpolation parameter across ``window``.

    Time is mapped onto [-1, 1] over the window span before fitting so the
    polynomial stays well conditioned for large absolute epochs. Derivatives
    are scaled accordingly on the way in and on the way out.
    """
    epoch = float(epoch)
    if len(window) == 0:
        raise NoInterpolationData(epoch, "empty interpolation window")

    times = np.array([float(s.epoch) for s in window], dtype=float)
    for s in window:
        if float(s.epoch) == epoch:
            return s

    t_lo = float(times.min())
    t_hi = float(times.max())
    if len(window) < 2 or t_hi <= t_lo:
        raise NoInterpolationData(epoch, "interpolation window spans no time")
    if epoch < t_lo or epoch > t_hi:
        raise NoInterpolationData(epoch, f"outside window [{t_lo:.6f}, {t_hi:.6f}]")

    center = 0.5 * (t_lo + t_hi)
    half_span = 0.5 * (t_hi - t_lo)
    params = anchor.params()

    xs = np.repeat((times - center) / half_span, 2)
    ys = np.zeros((2 * len(window), len(params)), dtype=float)
    for i, sample in enumerate(window):
        for j, param in enumerate(params):
            value, value_dt = sample.value_and_deriv(param)
            ys[2 * i, j] = value
            ys[2 * i + 1, j] = value_dt * half_span

    # Repeated abscissae make Krogh match the value then the first derivative.
    poly = KroghInterpolator(xs, ys)
    x = (epoch - center) / half_span
    values = np.atleast_1d(poly(x))
    derivs = np.atleast_1d(poly.derivative(x)) / half_span

    state = anchor.with_epoch(epoch)
    for j, param in enumerate(params):
        state = state.set_value_and_deriv(param, float(values[j]), float(derivs[j]))
    return state
