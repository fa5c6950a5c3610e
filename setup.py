from setuptools import find_packages, setup
import os
from glob import glob

package_name = 'ackermann_local_planner'

setup(
    name=package_name,
    version='0.1.0',
    packages=find_packages(exclude=['test']),
    data_files=[
        ('share/ament_index/resource_index/packages', ['resource/' + package_name]),
        ('share/' + package_name, ['package.xml']),
        (os.path.join('share', package_name, 'launch'), glob('launch/*.launch.py')),
        (os.path.join('share', package_name, 'config'), glob('config/*.yaml')),
    ],
    install_requires=['setuptools', 'numpy'],
    extras_require={
        'test': ['pytest'],
    },
    zip_safe=True,
    maintainer='rami',
    maintainer_email='ramisabbagh23@gmail.com',
    description='Path-tracking local planner for Ackermann (car-like) robots.',
    license='MIT',
    tests_require=['pytest'],
    entry_points={
        'console_scripts': [
            'ackermann_planner = ackermann_local_planner.planner_node:main',
        ],
    },
)
