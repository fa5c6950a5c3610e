import pytest

from ackermann_local_planner.geometry import Pose, Velocity
from ackermann_local_planner.limits import KinematicLimits
from ackermann_local_planner.planner import AckermannPlanner


class FakePoseSource:
    def __init__(self, pose=Pose(0.0, 0.0, 0.0), velocity=Velocity()):
        self.pose = pose
        self.velocity = velocity

    def get_odom(self):
        return self.velocity

    def get_robot_pose(self):
        return self.pose


class CloudPoseSource(FakePoseSource):
    def __init__(self, cloud, weights=None, **kw):
        super().__init__(**kw)
        self.cloud = cloud
        self.weights = weights

    def get_particle_cloud(self):
        return (self.cloud, self.weights) if self.cloud else None


class FakeClock:
    def __init__(self, t=0.0, step=0.1):
        self.t = t
        self.step = step

    def __call__(self):
        return self.t

    def tick(self):
        self.t += self.step


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def source():
    return FakePoseSource()


@pytest.fixture
def make_planner(clock, source):
    def _make(limits=None, **kw):
        p = AckermannPlanner(limits=limits or KinematicLimits(), clock=clock, control_period=0.1)
        p.initialize('test_planner', source, **kw)
        return p
    return _make


def straight_path(length=5.0, step=0.25, yaw=0.0):
    n = int(round(length / step))
    return [Pose(i * step, 0.0, yaw) for i in range(n + 1)]
