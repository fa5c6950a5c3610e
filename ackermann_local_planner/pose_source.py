#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Collaborator interfaces the planner reads its pose and velocity from.

Pose selection (priority):
  1) pose cloud (particle filter) -> weighted mean pose
  2) pose with covariance          -> its mean pose
  3) single robot pose

Sources that do not have (1) or (2) simply omit those methods or return None.
"""

import math
from typing import Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np

from .geometry import Pose, Velocity


@runtime_checkable
class PoseSource(Protocol):
    """Snapshot reads of odometry and robot pose; must not block."""

    def get_odom(self) -> Velocity:
        ...

    def get_robot_pose(self) -> Optional[Pose]:
        ...


@runtime_checkable
class PathCostmapView(Protocol):
    """Non-owning view of the host costmap; only its frame is consumed."""

    @property
    def global_frame(self) -> str: ...


def mean_pose(poses: Sequence[Pose], weights: Optional[Sequence[float]] = None) -> Optional[Pose]:
    """Weighted mean position and circular mean yaw of a pose cloud."""
    if not poses:
        return None
    xyyaw = np.array([[p.x, p.y, p.yaw] for p in poses], dtype=np.float64)
    w = np.ones(len(poses)) if weights is None else np.asarray(weights, dtype=np.float64)
    if w.shape != (len(poses),) or not np.all(np.isfinite(w)) or float(w.sum()) <= 0.0:
        w = np.ones(len(poses))
    w = w / w.sum()
    x = float(np.dot(w, xyyaw[:, 0]))
    y = float(np.dot(w, xyyaw[:, 1]))
    s = float(np.dot(w, np.sin(xyyaw[:, 2])))
    c = float(np.dot(w, np.cos(xyyaw[:, 2])))
    return Pose(x, y, math.atan2(s, c))


def select_pose(source: PoseSource) -> Optional[Pose]:
    get_cloud = getattr(source, 'get_particle_cloud', None)
    if get_cloud is not None:
        cloud: Optional[Tuple[Sequence[Pose], Optional[Sequence[float]]]] = get_cloud()
        if cloud:
            poses, weights = cloud
            p = mean_pose(poses, weights)
            if p is not None:
                return p

    get_cov = getattr(source, 'get_pose_with_covariance', None)
    if get_cov is not None:
        pwc = get_cov()
        if pwc is not None:
            pose, _covariance = pwc
            return pose

    return source.get_robot_pose()
