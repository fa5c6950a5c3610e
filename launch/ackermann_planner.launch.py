import os

from launch import LaunchDescription
from launch_ros.actions import Node
from launch.substitutions import LaunchConfiguration
from launch.actions import DeclareLaunchArgument
from ament_index_python.packages import get_package_share_directory


def generate_launch_description():
    params_file = os.path.join(
        get_package_share_directory('ackermann_local_planner'), 'config', 'ackermann_planner.yaml')

    return LaunchDescription([
        DeclareLaunchArgument('plan_topic', default_value='/plan'),
        DeclareLaunchArgument('odom_topic', default_value='/odom'),
        DeclareLaunchArgument('cmd_vel_topic', default_value='/cmd_vel'),
        DeclareLaunchArgument('use_sim_time', default_value='true'),

        Node(
            package='ackermann_local_planner',
            executable='ackermann_planner',
            name='ackermann_planner',
            output='screen',
            parameters=[params_file, {
                'plan_topic': LaunchConfiguration('plan_topic'),
                'odom_topic': LaunchConfiguration('odom_topic'),
                'cmd_vel_topic': LaunchConfiguration('cmd_vel_topic'),
                'use_sim_time': LaunchConfiguration('use_sim_time'),
            }]
        )
    ])
