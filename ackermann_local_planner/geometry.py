#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Planar geometry helpers and the per-cycle value types of the planner.

Poses are (x, y, yaw) in the global frame, yaw in radians. Velocities are
body-frame linear speed (m/s, positive = forward) and yaw rate (rad/s).
"""

import math
from dataclasses import dataclass


# ----------------------- value types -----------------------
@dataclass(frozen=True)
class Pose:
    x: float
    y: float
    yaw: float = 0.0


@dataclass(frozen=True)
class Velocity:
    linear: float = 0.0
    angular: float = 0.0


@dataclass(frozen=True)
class VelocityCommand:
    linear: float
    angular: float

    @classmethod
    def stop(cls) -> 'VelocityCommand':
        return cls(0.0, 0.0)

    @property
    def curvature(self) -> float:
        if abs(self.linear) < 1e-9:
            return 0.0
        return self.angular / self.linear


# ----------------------- small utils -----------------------
def clamp(x, lo, hi): return lo if x < lo else hi if x > hi else x
def wrap(a): return math.atan2(math.sin(a), math.cos(a))
def sq(x): return x * x


def yaw_from_quat(x, y, z, w):
    return math.atan2(2.0*(w*z + x*y), 1.0 - 2.0*(y*y + z*z))


def quat_from_yaw(yaw):
    """(x, y, z, w) of a pure rotation about +z."""
    return 0.0, 0.0, math.sin(yaw / 2.0), math.cos(yaw / 2.0)


def dist(a: Pose, b: Pose) -> float:
    return math.sqrt(sq(b.x - a.x) + sq(b.y - a.y))


def angle_difference(a: Pose, b: Pose) -> float:
    """Absolute heading difference in [0, pi]."""
    return abs(wrap(b.yaw - a.yaw))


def is_forwards(start: Pose, end: Pose) -> bool:
    """True when driving start -> end moves along start's heading.

    Sign of the dot product between start's heading vector and the
    displacement. Coincident poses count as forward.
    """
    dx = end.x - start.x
    dy = end.y - start.y
    return math.cos(start.yaw) * dx + math.sin(start.yaw) * dy >= 0.0


def to_body_frame(origin: Pose, p: Pose):
    """Coordinates of p in the frame of origin (x ahead, y left)."""
    dx = p.x - origin.x
    dy = p.y - origin.y
    ca, sa = math.cos(-origin.yaw), math.sin(-origin.yaw)
    return ca*dx - sa*dy, sa*dx + ca*dy


def interpolate(a: Pose, b: Pose, t: float) -> Pose:
    t = clamp(t, 0.0, 1.0)
    yaw = wrap(a.yaw + t * wrap(b.yaw - a.yaw))
    return Pose(a.x + t * (b.x - a.x), a.y + t * (b.y - a.y), yaw)
