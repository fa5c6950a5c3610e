#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Global path held by the planner, the cursor into it, and the two searches
run over it every cycle:

  - nearest point: scan the suffix [cursor, end) for the waypoint that best
    matches the current pose in position *and* heading
  - lookahead: walk forward from the nearest point along the path until the
    configured arc length is covered, a cusp is met, or the path ends
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import numpy as np

from .geometry import Pose, dist, interpolate, is_forwards

# Cursor moves larger than this (in waypoints) are reported as suspicious.
CURSOR_JUMP_WARN = 20

# Segments shorter than this carry no direction information.
SEGMENT_EPS = 1e-6


class PathState:
    """Immutable path plus the last-known nearest index.

    A new plan always gets a new PathState; the planner swaps the reference
    so a cycle in progress keeps working on the one it started with.
    """

    def __init__(self, poses: Iterable[Pose] = ()):
        self.poses: Tuple[Pose, ...] = tuple(poses)
        self.cursor = 0
        if self.poses:
            arr = np.array([[p.x, p.y, p.yaw] for p in self.poses], dtype=np.float64)
        else:
            arr = np.zeros((0, 3), dtype=np.float64)
        self._xy = arr[:, :2]
        self._yaw = arr[:, 2]

    def __len__(self):
        return len(self.poses)

    @property
    def empty(self) -> bool:
        return not self.poses

    @property
    def last_index(self) -> int:
        return len(self.poses) - 1

    @property
    def goal(self) -> Optional[Pose]:
        return self.poses[-1] if self.poses else None

    @property
    def at_last_waypoint(self) -> bool:
        return bool(self.poses) and self.cursor == self.last_index

    def remaining(self) -> Tuple[Pose, ...]:
        """Poses from the cursor to the end (the local plan)."""
        return self.poses[self.cursor:]

    # --------------- nearest point ----------------
    def nearest_index(self, pose: Pose, heading_weight: float = 1.0) -> int:
        """Index in [cursor, end) minimising distance + heading_weight * |dyaw|.

        Never returns an index before the cursor. Ties go to the lower index.
        """
        if self.empty:
            return self.cursor
        xy = self._xy[self.cursor:]
        yaw = self._yaw[self.cursor:]
        d = np.hypot(xy[:, 0] - pose.x, xy[:, 1] - pose.y)
        dyaw = np.abs(np.arctan2(np.sin(yaw - pose.yaw), np.cos(yaw - pose.yaw)))
        metric = d + heading_weight * dyaw
        return self.cursor + int(np.argmin(metric))

    def advance(self, pose: Pose, heading_weight: float = 1.0) -> int:
        """Move the cursor to the nearest point; returns the jump in waypoints."""
        new = self.nearest_index(pose, heading_weight)
        jump = new - self.cursor
        self.cursor = new
        return jump


@dataclass(frozen=True)
class Lookahead:
    """Target chosen by the lookahead walk.

    Attributes:
        target: Pose pursued this cycle (interpolated along the path).
        index: First waypoint at or beyond the target.
        forward: Direction of travel of the segment being followed.
        arc_length: Path length from the vehicle to the target.
        stop_distance: Path length from the vehicle to a cusp or the path end
            when one lies within the lookahead, else None. 0 once passed.
    """

    target: Pose
    index: int
    forward: bool
    arc_length: float
    stop_distance: Optional[float] = None

    @property
    def must_stop(self) -> bool:
        return self.stop_distance is not None


def along_track_offset(poses, index: int, pose: Pose) -> float:
    """Signed distance of pose past poses[index], measured along the path.

    Uses the first non-degenerate segment leaving index, or the one arriving
    at it on the last waypoint. Positive means further along the path.
    """
    n = len(poses)
    if n < 2:
        return 0.0
    a = poses[index]
    ref = None
    for j in range(index + 1, n):
        if dist(a, poses[j]) > SEGMENT_EPS:
            ref = (a, poses[j])
            break
    else:
        for j in range(index - 1, -1, -1):
            if dist(poses[j], a) > SEGMENT_EPS:
                ref = (poses[j], a)
                break
    if ref is None:
        return 0.0
    p, q = ref
    seg = dist(p, q)
    ux, uy = (q.x - p.x) / seg, (q.y - p.y) / seg
    return (pose.x - a.x) * ux + (pose.y - a.y) * uy


def select_lookahead(poses, start: int, distance: float, offset: float = 0.0) -> Optional[Lookahead]:
    """Walk the path from poses[start]; offset is along_track_offset of the vehicle."""
    n = len(poses)
    if n == 0:
        return None
    start = max(0, min(int(start), n - 1))

    if start == n - 1:
        forward = is_forwards(poses[n-2], poses[n-1]) if n >= 2 else True
        remaining = max(0.0, -offset)
        return Lookahead(poses[start], start, forward, remaining, remaining)

    forward = None
    travelled = -offset
    i = start + 1
    while i < n:
        a, b = poses[i-1], poses[i]
        seg = dist(a, b)
        if seg > SEGMENT_EPS:
            d = is_forwards(a, b)
            if forward is None:
                forward = d
            elif d != forward:
                # cusp at a
                left = max(0.0, travelled)
                return Lookahead(a, i-1, forward, left, left)
            if travelled + seg >= distance:
                t = (distance - travelled) / seg
                stop = max(0.0, travelled + seg) if i == n - 1 else None
                return Lookahead(interpolate(a, b, t), i, forward, distance, stop)
            travelled += seg
        # always advance, even across duplicate waypoints
        i += 1

    if forward is None:
        forward = True
    left = max(0.0, travelled)
    return Lookahead(poses[-1], n - 1, forward, left, left)
