#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command synthesis: pure-pursuit curvature toward the lookahead target,
bounded by the Ackermann turning radius, the speed window and the
acceleration ramp.

    kappa = 2 * y_R / L^2        (target at (x_R, y_R) in the body frame)
    |kappa| <= 1 / min_radius
    v in [min_vel, max_vel],  |v - v_prev| <= acc_lim * dt
    w = v * kappa

The sign of v follows where the target lies: ahead drives forward, behind
reverses (or stops when reversing is not allowed). A target beside the
vehicle keeps the direction of the path segment being followed.
A command whose sign opposes the measured velocity is only issued once the
vehicle is at rest (|v_meas| <= REVERSAL_EPS).
"""

import math
from typing import Optional

from .geometry import Pose, Velocity, VelocityCommand, clamp, to_body_frame
from .limits import KinematicLimits
from .path_state import Lookahead

REVERSAL_EPS = 0.01  # m/s
TARGET_BESIDE_EPS = 1e-6  # m


def pursuit_curvature(pose: Pose, target: Pose, max_curvature: float = float('inf')) -> float:
    xR, yR = to_body_frame(pose, target)
    L2 = xR*xR + yR*yR
    if L2 < 1e-9:
        return 0.0
    return clamp(2.0 * yR / L2, -max_curvature, max_curvature)


def opposes(v: float, measured: float) -> bool:
    """v would reverse a vehicle that is still moving."""
    return v * measured < 0.0 and abs(measured) > REVERSAL_EPS


class CommandSynthesizer:
    """Turns a lookahead target into a bounded (v, w) command.

    Keeps the last commanded speed and its timestamp for the acceleration
    ramp. Before the first command the ramp starts from the measured speed
    over one nominal control period.
    """

    def __init__(self, control_period: float = 0.1):
        self.control_period = control_period
        self.last_linear: Optional[float] = None
        self.last_time: Optional[float] = None

    def reset(self):
        self.last_linear = None
        self.last_time = None

    def hold(self, now: float):
        """Record that a stop command went out."""
        self.last_linear = 0.0
        self.last_time = now

    def _ramp_base(self, velocity: Velocity, now: float):
        if self.last_linear is None or self.last_time is None:
            return velocity.linear, self.control_period
        return self.last_linear, max(0.0, now - self.last_time)

    def _step(self, v_des: float, velocity: Velocity, limits: KinematicLimits, now: float) -> float:
        if opposes(v_des, velocity.linear):
            v_des = 0.0

        base, dt = self._ramp_base(velocity, now)
        step = limits.acc_lim * dt
        v = clamp(v_des, base - step, base + step)

        if opposes(v, velocity.linear):
            v = 0.0

        v = clamp(v, limits.min_vel, limits.max_vel)
        self.last_linear = v
        self.last_time = now
        return v

    def brake(self, velocity: Velocity, limits: KinematicLimits, now: float) -> VelocityCommand:
        """Ramp toward rest without steering; (0, 0) once stopped."""
        v = self._step(0.0, velocity, limits, now)
        if v == 0.0:
            return VelocityCommand.stop()
        return VelocityCommand(v, 0.0)

    def synthesize(self, pose: Pose, velocity: Velocity, lookahead: Lookahead,
                   limits: KinematicLimits, now: float) -> VelocityCommand:
        kappa = pursuit_curvature(pose, lookahead.target, limits.max_curvature)
        xR, yR = to_body_frame(pose, lookahead.target)

        forward = lookahead.forward if abs(xR) < TARGET_BESIDE_EPS else xR > 0.0
        if forward:
            v_des = limits.max_vel
        elif limits.allows_reverse:
            v_des = limits.min_vel
        else:
            v_des = 0.0

        # be able to come to rest at a cusp or the goal
        if lookahead.must_stop:
            d_stop = max(lookahead.stop_distance, math.hypot(xR, yR))
            cap = math.sqrt(2.0 * limits.acc_lim * d_stop)
            v_des = clamp(v_des, -cap, cap)

        v = self._step(v_des, velocity, limits, now)
        return VelocityCommand(v, v * kappa)
