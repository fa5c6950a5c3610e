#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Ackermann local planner core.

Per cycle:  pose/odom -> nearest path point -> goal check -> lookahead
            -> command synthesis -> (v, w) or None

Plans and configurations can be swapped in from another thread at any time;
a cycle snapshots both references once at its start and never sees a
half-updated path or limit set. The lock only guards those swaps.
"""

import logging
import threading
import time
from enum import Enum
from typing import Callable, Iterable, Mapping, Optional, Sequence, Union

from .command import CommandSynthesizer
from .geometry import Pose, VelocityCommand, angle_difference, dist
from .limits import KinematicLimits
from .path_state import CURSOR_JUMP_WARN, Lookahead, PathState, along_track_offset, select_lookahead
from .pose_source import PathCostmapView, PoseSource, select_pose

LocalPlanSink = Callable[[Sequence[Pose]], None]


class PlannerState(Enum):
    UNINITIALIZED = 0
    READY = 1


class AckermannPlanner:
    def __init__(self,
                 limits: Optional[KinematicLimits] = None,
                 clock: Optional[Callable[[], float]] = None,
                 logger=None,
                 control_period: float = 0.1):
        self.logger = logger if logger is not None else logging.getLogger('ackermann_local_planner')
        self._clock = clock if clock is not None else time.monotonic
        self._lock = threading.Lock()

        self._state = PlannerState.UNINITIALIZED
        self._limits = limits if limits is not None else KinematicLimits()
        self._path = PathState()
        self._synth = CommandSynthesizer(control_period)

        # injected, not owned
        self.name: Optional[str] = None
        self._pose_source: Optional[PoseSource] = None
        self._costmap: Optional[PathCostmapView] = None
        self._local_plan_sink: Optional[LocalPlanSink] = None

        # last-cycle introspection
        self.last_jump = 0
        self.last_lookahead: Optional[Lookahead] = None
        self._goal_announced = False

    # ------------------- state -------------------
    @property
    def state(self) -> PlannerState:
        return self._state

    @property
    def initialized(self) -> bool:
        return self._state is PlannerState.READY

    @property
    def limits(self) -> KinematicLimits:
        return self._limits

    @property
    def path(self) -> PathState:
        return self._path

    @property
    def cursor(self) -> int:
        return self._path.cursor

    @property
    def global_frame(self) -> str:
        """Frame the plan and poses are expressed in."""
        if self._costmap is None:
            return 'map'
        return self._costmap.global_frame

    def _require_ready(self) -> bool:
        if self._state is PlannerState.READY:
            return True
        self.logger.error("This planner has not been initialized, please call initialize() before using this planner")
        return False

    # ------------------- lifecycle -------------------
    def initialize(self, name: str, pose_source: PoseSource,
                   costmap: Optional[PathCostmapView] = None,
                   local_plan_sink: Optional[LocalPlanSink] = None) -> bool:
        """Attach collaborators. A second call is a warned no-op (returns False)."""
        if self._state is PlannerState.READY:
            self.logger.warning("This planner has already been initialized, doing nothing.")
            return False
        self.name = name
        self._pose_source = pose_source
        self._costmap = costmap
        self._local_plan_sink = local_plan_sink
        self._synth.reset()
        self._state = PlannerState.READY
        self.logger.info(f"Ackermann planner '{name}' initialized")
        return True

    def shutdown(self):
        with self._lock:
            self._path = PathState()
        self._pose_source = None
        self._costmap = None
        self._local_plan_sink = None
        self._state = PlannerState.UNINITIALIZED

    # ------------------- inputs -------------------
    def set_plan(self, poses: Iterable[Pose]) -> bool:
        if not self._require_ready():
            return False
        new_path = PathState(poses)
        with self._lock:
            self._path = new_path
            self._goal_announced = False
        self.logger.info(f"Got new plan ({len(new_path)} poses)")
        return True

    def apply_configuration(self, limits: Union[KinematicLimits, Mapping]) -> KinematicLimits:
        """Swap in a new limit set. Mappings are merged over the active one.

        Raises ValueError (and keeps the active set) when the result is invalid.
        """
        if not isinstance(limits, KinematicLimits):
            merged = self._limits.as_dict()
            merged.update({k: v for k, v in limits.items() if k in merged})
            limits = KinematicLimits.from_parameters(merged)
        with self._lock:
            self._limits = limits
        self.logger.info(
            f"Reconfigured: vel=[{limits.min_vel}, {limits.max_vel}] m/s  min_radius={limits.min_radius} m  "
            f"acc_lim={limits.acc_lim} m/s^2  lookahead={limits.forward_point_distance} m  move={limits.move}"
        )
        return limits

    # ------------------- queries -------------------
    def _snapshot(self):
        with self._lock:
            return self._path, self._limits

    @staticmethod
    def _goal_within(path: PathState, pose: Pose, limits: KinematicLimits) -> bool:
        if not path.at_last_waypoint:
            return False
        goal = path.goal
        return (dist(pose, goal) <= limits.xy_goal_tolerance and
                angle_difference(pose, goal) <= limits.yaw_goal_tolerance)

    def is_goal_reached(self) -> bool:
        """Cursor on the final waypoint and pose within both tolerances.

        Reads the pose but never moves the cursor, so repeated calls agree.
        """
        if not self._require_ready():
            return False
        path, limits = self._snapshot()
        if path.empty:
            return False
        pose = select_pose(self._pose_source)
        if pose is None:
            return False
        return self._goal_within(path, pose, limits)

    # ------------------- control cycle -------------------
    def compute_velocity_commands(self) -> Optional[VelocityCommand]:
        """One control cycle. None means no command could be produced."""
        if not self._require_ready():
            return None
        path, limits = self._snapshot()
        if path.empty:
            self.logger.warning("No plan to follow; a new global plan is needed")
            return None

        now = self._clock()
        velocity = self._pose_source.get_odom()
        pose = select_pose(self._pose_source)
        if pose is None:
            self.logger.warning("No robot pose available; not commanding")
            return None

        # nearest point on the plan, in both angle and linear space
        jump = path.advance(pose, limits.heading_weight)
        self.last_jump = jump
        if jump > CURSOR_JUMP_WARN:
            self.logger.warning(
                f"Whoa! We moved {jump} waypoints in one cycle. Not sure we're still on the right part of the plan")

        if self._local_plan_sink is not None:
            self._local_plan_sink(path.remaining())

        if self._goal_within(path, pose, limits):
            if not self._goal_announced:
                self._goal_announced = True
                self.logger.info("Goal reached")
            self.last_lookahead = None
            if not limits.move:
                self._synth.hold(now)
                return VelocityCommand.stop()
            return self._synth.brake(velocity, limits, now)

        offset = along_track_offset(path.poses, path.cursor, pose)
        look = select_lookahead(path.poses, path.cursor, limits.forward_point_distance, offset)
        self.last_lookahead = look
        if look is None:
            return None

        cmd = self._synth.synthesize(pose, velocity, look, limits, now)

        if not limits.move:
            self._synth.hold(now)
            return VelocityCommand.stop()
        return cmd
