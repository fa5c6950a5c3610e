#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from dataclasses import asdict, dataclass, fields, replace as _replace
from typing import Any, Dict, Mapping


_TRUE = ('true', 'yes', 'on', '1')
_FALSE = ('false', 'no', 'off', '0')


def as_bool(v) -> bool:
    """Strict flag parsing; bool("false") would be True."""
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)) and v in (0, 1):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in _TRUE:
            return True
        if s in _FALSE:
            return False
    raise ValueError(f"KinematicLimits: move must be a boolean, got {v!r}")


@dataclass(frozen=True)
class KinematicLimits:
    """Active configuration snapshot of the planner.

    Attributes:
        max_vel: Upper bound on the commanded linear speed (m/s).
        min_vel: Signed lower bound on the commanded linear speed (m/s), <= 0.
            Negative values allow reversing at up to |min_vel|; 0 forbids it.
            Positive values are rejected: the vehicle must be able to stop.
        min_radius: Smallest turning radius the vehicle may be commanded (m).
            0 disables the curvature clamp.
        acc_lim: Largest change of commanded linear speed per second (m/s^2).
        forward_point_distance: Arc length from the nearest path point to the
            pursued target point (m).
        xy_goal_tolerance: Position tolerance at the final waypoint (m).
        yaw_goal_tolerance: Heading tolerance at the final waypoint (rad).
        move: Master switch; when False every command is (0, 0).
        heading_weight: Metres charged per radian of heading difference when
            locating the nearest path point. 1.0 sums metres and radians
            directly; 0.0 uses position only.
    """

    max_vel: float = 1.0
    min_vel: float = -0.5
    min_radius: float = 1.0
    acc_lim: float = 1.0
    forward_point_distance: float = 1.0
    xy_goal_tolerance: float = 0.2
    yaw_goal_tolerance: float = 0.3
    move: bool = True
    heading_weight: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, 'move', as_bool(self.move))
        if self.max_vel < 0:
            raise ValueError("KinematicLimits: max_vel must be >= 0")
        if self.min_vel > 0:
            raise ValueError("KinematicLimits: min_vel must be <= 0")
        if self.min_radius < 0:
            raise ValueError("KinematicLimits: min_radius must be >= 0")
        if self.acc_lim <= 0:
            raise ValueError("KinematicLimits: acc_lim must be > 0")
        if self.forward_point_distance <= 0:
            raise ValueError("KinematicLimits: forward_point_distance must be > 0")
        if self.xy_goal_tolerance < 0 or self.yaw_goal_tolerance < 0:
            raise ValueError("KinematicLimits: goal tolerances must be >= 0")
        if self.heading_weight < 0:
            raise ValueError("KinematicLimits: heading_weight must be >= 0")

    @property
    def max_curvature(self) -> float:
        return float('inf') if self.min_radius <= 0.0 else 1.0 / self.min_radius

    @property
    def allows_reverse(self) -> bool:
        return self.min_vel < 0.0

    @classmethod
    def option_names(cls):
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_parameters(cls, params: Mapping[str, Any]) -> 'KinematicLimits':
        """Build a snapshot from a name -> value mapping; unknown keys ignored."""
        known = set(cls.option_names())
        kw = {}
        for k, v in params.items():
            if k not in known:
                continue
            kw[k] = as_bool(v) if k == 'move' else float(v)
        return cls(**kw)

    def replace(self, **changes) -> 'KinematicLimits':
        return _replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)
