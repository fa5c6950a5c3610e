import math

import pytest

from ackermann_local_planner.limits import KinematicLimits


def test_defaults_are_valid():
    lim = KinematicLimits()
    assert lim.move
    assert lim.allows_reverse
    assert lim.max_curvature == pytest.approx(1.0)


@pytest.mark.parametrize('changes', [
    {'max_vel': -1.0},
    {'min_vel': 2.0, 'max_vel': 1.0},
    {'min_vel': 0.1},
    {'min_radius': -0.1},
    {'acc_lim': 0.0},
    {'forward_point_distance': 0.0},
    {'xy_goal_tolerance': -0.1},
    {'heading_weight': -1.0},
])
def test_invalid_limits_rejected(changes):
    with pytest.raises(ValueError):
        KinematicLimits(**changes)


def test_zero_min_radius_disables_curvature_clamp():
    assert math.isinf(KinematicLimits(min_radius=0.0).max_curvature)


def test_from_parameters_ignores_unknown_keys():
    lim = KinematicLimits.from_parameters({'max_vel': 2, 'move': 0, 'odom_topic': 'odom'})
    assert lim.max_vel == 2.0
    assert lim.move is False
    assert lim.acc_lim == KinematicLimits().acc_lim


def test_replace_returns_new_snapshot():
    a = KinematicLimits()
    b = a.replace(max_vel=3.0)
    assert a.max_vel == 1.0
    assert b.max_vel == 3.0


@pytest.mark.parametrize('raw, expected', [
    ('false', False), ('False', False), ('off', False), ('0', False),
    ('true', True), ('yes', True), (1, True), (True, True),
])
def test_move_flag_parsed_strictly(raw, expected):
    assert KinematicLimits.from_parameters({'move': raw}).move is expected


@pytest.mark.parametrize('raw', ['maybe', '', 2, 0.5])
def test_unrecognised_move_flag_rejected(raw):
    with pytest.raises(ValueError):
        KinematicLimits.from_parameters({'move': raw})
    with pytest.raises(ValueError):
        KinematicLimits(move=raw)
