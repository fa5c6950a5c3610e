"""Ackermann (car-like) local planner: path tracking toward a global plan."""

from .geometry import Pose, Velocity, VelocityCommand, is_forwards
from .limits import KinematicLimits
from .path_state import CURSOR_JUMP_WARN, Lookahead, PathState, select_lookahead
from .planner import AckermannPlanner, PlannerState
from .pose_source import PathCostmapView, PoseSource

__all__ = [
    "AckermannPlanner",
    "PlannerState",
    "KinematicLimits",
    "Pose",
    "Velocity",
    "VelocityCommand",
    "PathState",
    "Lookahead",
    "select_lookahead",
    "is_forwards",
    "CURSOR_JUMP_WARN",
    "PoseSource",
    "PathCostmapView",
]
