#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ROS 2 host for the Ackermann local planner.

Subscribes:
  - plan (nav_msgs/Path)                        global plan, replaces the current one
  - odom (nav_msgs/Odometry)                    measured linear/angular velocity
  - amcl_pose (PoseWithCovarianceStamped)       optional, use_amcl_pose
  - particlecloud (geometry_msgs/PoseArray)     optional, use_particlecloud
Publishes:
  - cmd_vel (geometry_msgs/Twist)
  - ~/local_plan (nav_msgs/Path)                plan from the cursor onward

Robot pose priority: particle cloud -> AMCL pose -> TF global_frame->base_frame.
Stale AMCL/cloud messages (older than pose_stale_timeout_s) are ignored.

Planner limits are ROS parameters and can be changed at runtime
(ros2 param set); invalid sets are refused and the active one is kept.
"""

from typing import List, Optional, Sequence, Tuple

import rclpy
from rclpy.node import Node
from rclpy.time import Time
from rclpy.duration import Duration
from rclpy.qos import QoSProfile, ReliabilityPolicy, HistoryPolicy
from rcl_interfaces.msg import SetParametersResult

from geometry_msgs.msg import Twist, PoseStamped, PoseWithCovarianceStamped, PoseArray
from nav_msgs.msg import Path, Odometry

from tf2_ros import Buffer, TransformListener, LookupException, ConnectivityException, ExtrapolationException

from .geometry import Pose, Velocity, VelocityCommand, quat_from_yaw, yaw_from_quat
from .limits import KinematicLimits
from .planner import AckermannPlanner


def pose_from_msg(p) -> Pose:
    q = p.orientation
    return Pose(float(p.position.x), float(p.position.y), yaw_from_quat(q.x, q.y, q.z, q.w))


class RosPoseSource:
    """Latches the latest odom / AMCL / particle cloud and reads TF on demand."""

    def __init__(self, node: Node, global_frame: str, base_frame: str,
                 tf_timeout: float, stale_timeout: float,
                 use_amcl: bool, use_cloud: bool):
        self.node = node
        self.global_frame = global_frame
        self.base_frame = base_frame
        self.tf_timeout = tf_timeout
        self.stale_timeout = stale_timeout
        self.use_amcl = use_amcl
        self.use_cloud = use_cloud

        self.last_odom: Optional[Odometry] = None
        self.last_amcl: Optional[PoseWithCovarianceStamped] = None
        self.last_amcl_time: Optional[Time] = None
        self.last_cloud: Optional[PoseArray] = None
        self.last_cloud_time: Optional[Time] = None

        self.tf_buffer = Buffer(cache_time=Duration(seconds=5.0))
        self.tf_listener = TransformListener(self.tf_buffer, node)

    # ------------------- callbacks -------------------
    def odom_cb(self, msg: Odometry):
        self.last_odom = msg

    def amcl_cb(self, msg: PoseWithCovarianceStamped):
        self.last_amcl = msg
        self.last_amcl_time = self.node.get_clock().now()

    def cloud_cb(self, msg: PoseArray):
        self.last_cloud = msg
        self.last_cloud_time = self.node.get_clock().now()

    def _fresh(self, stamp: Optional[Time]) -> bool:
        if stamp is None:
            return False
        return (self.node.get_clock().now() - stamp) <= Duration(seconds=self.stale_timeout)

    # ------------------- PoseSource -------------------
    def get_odom(self) -> Velocity:
        if self.last_odom is None:
            return Velocity()
        t = self.last_odom.twist.twist
        return Velocity(float(t.linear.x), float(t.angular.z))

    def get_particle_cloud(self) -> Optional[Tuple[List[Pose], None]]:
        if not self.use_cloud or self.last_cloud is None or not self._fresh(self.last_cloud_time):
            return None
        poses = [pose_from_msg(p) for p in self.last_cloud.poses]
        return (poses, None) if poses else None

    def get_pose_with_covariance(self) -> Optional[Tuple[Pose, Sequence[float]]]:
        if not self.use_amcl or self.last_amcl is None or not self._fresh(self.last_amcl_time):
            return None
        return pose_from_msg(self.last_amcl.pose.pose), tuple(self.last_amcl.pose.covariance)

    def get_robot_pose(self) -> Optional[Pose]:
        try:
            tf = self.tf_buffer.lookup_transform(self.global_frame, self.base_frame, Time(),
                                                 timeout=Duration(seconds=self.tf_timeout))
        except (LookupException, ConnectivityException, ExtrapolationException):
            return None
        t = tf.transform.translation
        q = tf.transform.rotation
        return Pose(float(t.x), float(t.y), yaw_from_quat(q.x, q.y, q.z, q.w))


class FrameView:
    def __init__(self, frame: str):
        self._frame = frame

    @property
    def global_frame(self) -> str:
        return self._frame


class AckermannPlannerNode(Node):
    def __init__(self):
        super().__init__('ackermann_planner')

        # --- Topics & frames ---
        self.declare_parameter('plan_topic', 'plan')
        self.declare_parameter('odom_topic', 'odom')
        self.declare_parameter('cmd_vel_topic', 'cmd_vel')
        self.declare_parameter('amcl_pose_topic', 'amcl_pose')
        self.declare_parameter('particlecloud_topic', 'particlecloud')
        self.declare_parameter('global_frame', 'map')
        self.declare_parameter('base_frame', 'base_link')

        # Pose source / timeouts
        self.declare_parameter('use_particlecloud', False)
        self.declare_parameter('use_amcl_pose', False)
        self.declare_parameter('pose_stale_timeout_s', 0.5)
        self.declare_parameter('tf_timeout_s', 0.1)
        self.declare_parameter('rate_hz', 10.0)

        # --- Planner limits (reconfigurable) ---
        defaults = KinematicLimits()
        for name, value in defaults.as_dict().items():
            self.declare_parameter(name, value)

        gp = self.get_parameter
        self.global_frame = gp('global_frame').value
        self.rate_hz = float(gp('rate_hz').value)
        self.dt = 1.0 / max(1.0, self.rate_hz)

        limits = KinematicLimits.from_parameters(
            {name: gp(name).value for name in KinematicLimits.option_names()})

        self.planner = AckermannPlanner(
            limits=limits,
            clock=lambda: self.get_clock().now().nanoseconds * 1e-9,
            logger=self.get_logger(),
            control_period=self.dt,
        )

        self.pose_source = RosPoseSource(
            self,
            global_frame=self.global_frame,
            base_frame=gp('base_frame').value,
            tf_timeout=float(gp('tf_timeout_s').value),
            stale_timeout=float(gp('pose_stale_timeout_s').value),
            use_amcl=bool(gp('use_amcl_pose').value),
            use_cloud=bool(gp('use_particlecloud').value),
        )

        # --- Publishers ---
        self.cmd_pub = self.create_publisher(Twist, gp('cmd_vel_topic').value, 10)
        self.local_plan_pub = self.create_publisher(Path, '~/local_plan', 1)

        # --- Subscriptions ---
        qos_reliable = QoSProfile(depth=10, reliability=ReliabilityPolicy.RELIABLE, history=HistoryPolicy.KEEP_LAST)
        qos_best = QoSProfile(depth=10, reliability=ReliabilityPolicy.BEST_EFFORT, history=HistoryPolicy.KEEP_LAST)
        self.create_subscription(Path, gp('plan_topic').value, self._plan_cb, qos_reliable)
        self.create_subscription(Odometry, gp('odom_topic').value, self.pose_source.odom_cb, qos_best)
        self.create_subscription(PoseWithCovarianceStamped, gp('amcl_pose_topic').value,
                                 self.pose_source.amcl_cb, qos_reliable)
        self.create_subscription(PoseArray, gp('particlecloud_topic').value,
                                 self.pose_source.cloud_cb, qos_best)

        self.planner.initialize(self.get_name(), self.pose_source,
                                costmap=FrameView(self.global_frame),
                                local_plan_sink=self._publish_local_plan)

        self.add_on_set_parameters_callback(self._on_param_change)

        self.timer = self.create_timer(self.dt, self._loop)
        self.get_logger().info(
            f"Ackermann planner up. rate={self.rate_hz} Hz  max_vel={limits.max_vel} m/s  "
            f"min_radius={limits.min_radius} m  move={'ON' if limits.move else 'OFF'}"
        )

    # ------------------- Parameters -------------------
    def _on_param_change(self, params) -> SetParametersResult:
        changes = {p.name: p.value for p in params if p.name in KinematicLimits.option_names()}
        if not changes:
            return SetParametersResult(successful=True)
        try:
            self.planner.apply_configuration(changes)
        except (TypeError, ValueError) as e:
            return SetParametersResult(successful=False, reason=str(e))
        return SetParametersResult(successful=True)

    # ------------------- Plan in / out -------------------
    def _plan_cb(self, msg: Path):
        self.planner.set_plan([pose_from_msg(ps.pose) for ps in msg.poses])

    def _build_path_msg(self, poses: Sequence[Pose]) -> Path:
        path = Path()
        path.header.frame_id = self.planner.global_frame
        path.header.stamp = self.get_clock().now().to_msg()
        for p in poses:
            ps = PoseStamped()
            ps.header = path.header
            ps.pose.position.x = float(p.x)
            ps.pose.position.y = float(p.y)
            qx, qy, qz, qw = quat_from_yaw(p.yaw)
            ps.pose.orientation.x = qx
            ps.pose.orientation.y = qy
            ps.pose.orientation.z = qz
            ps.pose.orientation.w = qw
            path.poses.append(ps)
        return path

    def _publish_local_plan(self, poses: Sequence[Pose]):
        self.local_plan_pub.publish(self._build_path_msg(poses))

    # ------------------- Main control loop -------------------
    def _loop(self):
        cmd = self.planner.compute_velocity_commands()
        if cmd is None:
            # no plan / no pose: hold still until someone replans
            self.get_logger().warn("No velocity command this cycle; stopping", throttle_duration_sec=2.0)
            cmd = VelocityCommand.stop()
        self._send(cmd.linear, cmd.angular)

    # ------------------- cmd_vel helper -------------------
    def _send(self, v, w):
        msg = Twist()
        msg.linear.x = float(v)
        msg.angular.z = float(w)
        self.cmd_pub.publish(msg)


def main():
    rclpy.init()
    node = AckermannPlannerNode()
    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        pass
    finally:
        node._send(0.0, 0.0)
        node.planner.shutdown()
        node.destroy_node()
        rclpy.shutdown()


if __name__ == '__main__':
    main()
