import math

import pytest

from ackermann_local_planner.command import (
    REVERSAL_EPS, CommandSynthesizer, opposes, pursuit_curvature,
)
from ackermann_local_planner.geometry import Pose, Velocity, VelocityCommand
from ackermann_local_planner.limits import KinematicLimits
from ackermann_local_planner.path_state import Lookahead

ORIGIN = Pose(0.0, 0.0, 0.0)


def moving_synth(v, t=0.0):
    s = CommandSynthesizer(control_period=0.1)
    s.last_linear = v
    s.last_time = t
    return s


def test_pursuit_curvature_sign():
    assert pursuit_curvature(ORIGIN, Pose(1.0, 1.0)) == pytest.approx(1.0)
    assert pursuit_curvature(ORIGIN, Pose(1.0, -1.0)) == pytest.approx(-1.0)
    assert pursuit_curvature(ORIGIN, Pose(3.0, 0.0)) == 0.0
    assert pursuit_curvature(ORIGIN, ORIGIN) == 0.0


def test_turning_radius_never_below_min_radius():
    lim = KinematicLimits(min_radius=2.0)
    synth = moving_synth(1.0)
    cmd = synth.synthesize(ORIGIN, Velocity(1.0), Lookahead(Pose(1.0, 1.0), 1, True, 1.0), lim, 0.1)
    assert cmd.linear == pytest.approx(1.0)
    assert cmd.angular == pytest.approx(0.5)
    assert abs(cmd.linear / cmd.angular) >= lim.min_radius - 1e-9


@pytest.mark.parametrize('target', [Pose(0.3, 2.0), Pose(0.1, -0.5), Pose(-0.2, 0.4), Pose(1.0, 0.0)])
def test_speed_and_curvature_bounds(target):
    lim = KinematicLimits(max_vel=0.8, min_vel=-0.3, min_radius=1.5, acc_lim=5.0)
    for forward in (True, False):
        for v0 in (0.0, 0.8, -0.3):
            synth = CommandSynthesizer()
            cmd = synth.synthesize(ORIGIN, Velocity(v0), Lookahead(target, 1, forward, 1.0), lim, 0.0)
            assert lim.min_vel <= cmd.linear <= lim.max_vel
            assert abs(cmd.curvature) <= lim.max_curvature + 1e-9


def test_first_command_ramps_from_measured_speed():
    lim = KinematicLimits(max_vel=1.0, acc_lim=1.0)
    cmd = CommandSynthesizer(0.1).synthesize(ORIGIN, Velocity(0.0), Lookahead(Pose(3, 0), 1, True, 3.0), lim, 0.0)
    assert cmd.linear == pytest.approx(0.1)
    assert cmd.angular == pytest.approx(0.0)


def test_acceleration_limited_per_cycle():
    lim = KinematicLimits(max_vel=2.0, acc_lim=0.5)
    synth = moving_synth(0.2, t=1.0)
    look = Lookahead(Pose(3, 0), 1, True, 3.0)
    cmd = synth.synthesize(ORIGIN, Velocity(0.2), look, lim, 1.2)
    assert cmd.linear == pytest.approx(0.3)
    cmd = synth.synthesize(ORIGIN, Velocity(0.3), look, lim, 1.3)
    assert cmd.linear == pytest.approx(0.35)


def test_no_reversal_while_moving():
    lim = KinematicLimits(acc_lim=1.0)
    synth = CommandSynthesizer(0.1)
    behind = Lookahead(Pose(-1.0, 0.0), 1, False, 1.0)
    cmd = synth.synthesize(ORIGIN, Velocity(0.5), behind, lim, 0.0)
    assert cmd.linear == pytest.approx(0.4)
    assert not opposes(cmd.linear, 0.5)


def test_reversal_allowed_once_stopped():
    lim = KinematicLimits(acc_lim=1.0)
    synth = CommandSynthesizer(0.1)
    behind = Lookahead(Pose(-1.0, 0.0), 1, False, 1.0)
    cmd = synth.synthesize(ORIGIN, Velocity(REVERSAL_EPS / 2), behind, lim, 0.0)
    assert cmd.linear < 0.0


def test_reverse_forbidden_when_min_vel_zero():
    lim = KinematicLimits(min_vel=0.0)
    cmd = CommandSynthesizer().synthesize(ORIGIN, Velocity(0.0), Lookahead(Pose(-1.0, 0.0), 1, False, 1.0), lim, 0.0)
    assert cmd.linear == 0.0
    assert cmd.angular == 0.0


def test_speed_capped_before_stop_point():
    lim = KinematicLimits(max_vel=2.0, acc_lim=10.0)
    look = Lookahead(Pose(0.02, 0.0), 1, True, 0.02, 0.02)
    cmd = CommandSynthesizer(0.1).synthesize(ORIGIN, Velocity(0.0), look, lim, 0.0)
    assert cmd.linear == pytest.approx(math.sqrt(0.4))


def test_hold_restarts_ramp_from_zero():
    lim = KinematicLimits(acc_lim=1.0)
    synth = moving_synth(0.8)
    synth.hold(1.0)
    cmd = synth.synthesize(ORIGIN, Velocity(0.0), Lookahead(Pose(3, 0), 1, True, 3.0), lim, 1.1)
    assert cmd.linear == pytest.approx(0.1)


def test_target_behind_reverses_even_on_forward_segment():
    lim = KinematicLimits(min_vel=-0.5, acc_lim=1.0)
    look = Lookahead(Pose(-0.3, 0.0), 20, True, 0.0, 0.0)
    cmd = CommandSynthesizer(0.1).synthesize(ORIGIN, Velocity(0.0), look, lim, 0.0)
    assert cmd.linear == pytest.approx(-0.1)


def test_target_behind_without_reverse_stops():
    lim = KinematicLimits(min_vel=0.0, acc_lim=1.0)
    look = Lookahead(Pose(-0.3, 0.0), 20, True, 0.0, 0.0)
    synth = moving_synth(0.3)
    cmd = synth.synthesize(ORIGIN, Velocity(0.3), look, lim, 0.1)
    assert cmd.linear == pytest.approx(0.2)
    for t in (0.2, 0.3, 0.4):
        cmd = synth.synthesize(ORIGIN, Velocity(cmd.linear), look, lim, t)
    assert cmd.linear == 0.0


def test_target_at_vehicle_keeps_it_stopped():
    look = Lookahead(ORIGIN, 20, True, 0.0, 0.0)
    cmd = CommandSynthesizer(0.1).synthesize(ORIGIN, Velocity(0.0), look, KinematicLimits(), 0.0)
    assert cmd.linear == 0.0


def test_brake_ramps_down_to_stop():
    lim = KinematicLimits(acc_lim=1.0)
    synth = moving_synth(0.25)
    cmd = synth.brake(Velocity(0.25), lim, 0.1)
    assert cmd.linear == pytest.approx(0.15)
    assert cmd.angular == 0.0
    cmd = synth.brake(Velocity(0.15), lim, 0.2)
    assert cmd.linear == pytest.approx(0.05)
    assert synth.brake(Velocity(0.05), lim, 0.3) == VelocityCommand.stop()


def test_brake_from_reverse():
    lim = KinematicLimits(acc_lim=2.0)
    cmd = CommandSynthesizer(0.1).brake(Velocity(-0.5), lim, 0.0)
    assert cmd.linear == pytest.approx(-0.3)
