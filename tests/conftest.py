"""
@file conftest.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10
"""

import os
import numpy as np
import pytest

from humanoid_wbc.contact import ContactInformation
from humanoid_wbc.geometry import vec_to_so3
from humanoid_wbc.qp_input import QPInput

ROOTDIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
GRAVITY = 9.81


class PointFootRobot:
    """Analytic floating body with two massless point feet.

    The first three velocities are the CoM linear velocity, the next three the
    world angular velocity of the body and each foot hangs on a Cartesian leg
    of three prismatic actuators. The robot is at rest with an identity
    orientation, so all the dJ * v terms vanish.
    """
    def __init__(self, mass=30., inertia=(1.0, 1.2, 0.8), com=(0., 0., 0.5),
                 effort_limit=500.):
        self.mass = mass
        self.inertia = np.diag(inertia)
        self.com = np.array(com, dtype=float)
        self.nv = 12
        self.num_actuators = 6
        self.velocity_names = ["base_vx", "base_vy", "base_vz", "base_wx", "base_wy", "base_wz",
                               "l_x", "l_y", "l_z", "r_x", "r_y", "r_z"]
        self.feet = {"l_foot": (0, np.array([0., 0.1, -0.5])),
                     "r_foot": (1, np.array([0., -0.1, -0.5]))}
        self.effort_min = -effort_limit * np.ones(self.num_actuators)
        self.effort_max = effort_limit * np.ones(self.num_actuators)

    def get_inertia_matrix(self):
        M = np.zeros((self.nv, self.nv))
        M[0:3, 0:3] = self.mass * np.identity(3)
        M[3:6, 3:6] = self.inertia
        return M

    def get_nonlinear_effects(self):
        h = np.zeros(self.nv)
        h[2] = self.mass * GRAVITY
        return h

    def get_total_mass(self):
        return self.mass

    def get_gravity(self):
        return np.array([0., 0., -GRAVITY])

    def get_effort_limits(self):
        return self.effort_min, self.effort_max

    def get_actuator_selection_matrix(self):
        B = np.zeros((self.nv, self.num_actuators))
        B[6:, :] = np.identity(self.num_actuators)
        return B

    def get_com_position(self):
        return self.com

    def get_com_jacobian(self):
        J = np.zeros((3, self.nv))
        J[:, 0:3] = np.identity(3)
        return J

    def get_com_jacobian_dot_times_v(self):
        return np.zeros(3)

    def get_centroidal_momentum_matrix(self):
        Ag = np.zeros((6, self.nv))
        Ag[0:3, 0:3] = self.mass * np.identity(3)
        Ag[3:6, 3:6] = self.inertia
        return Ag

    def get_centroidal_momentum_matrix_dot_times_v(self):
        return np.zeros(6)

    def _check_frame(self, name):
        if name != "torso" and name not in self.feet:
            raise ValueError("Frame %s is not available." % name)

    def get_frame_position(self, name):
        self._check_frame(name)
        if name == "torso":
            return self.com.copy()
        return self.com + self.feet[name][1]

    def get_frame_rotation(self, name):
        self._check_frame(name)
        return np.identity(3)

    def get_frame_jacobian_world_aligned(self, name):
        self._check_frame(name)
        J = np.zeros((6, self.nv))
        J[0:6, 0:6] = np.identity(6)
        if name != "torso":
            leg, offset = self.feet[name]
            J[0:3, 3:6] = -vec_to_so3(offset)
            J[0:3, 6+3*leg:9+3*leg] = np.identity(3)
        return J

    def get_frame_jacobian_dot_times_v_world_aligned(self, name):
        self._check_frame(name)
        return np.zeros(6)

    def get_point_jacobian_world_aligned(self, name, point):
        J = self.get_frame_jacobian_world_aligned(name)
        offset = self.get_frame_rotation(name).dot(point)
        return J[0:3] - vec_to_so3(offset).dot(J[3:6])

    def get_point_jacobian_dot_times_v_world_aligned(self, name, point):
        self._check_frame(name)
        return np.zeros(3)


@pytest.fixture
def rootdir():
    return ROOTDIR


@pytest.fixture
def robot():
    return PointFootRobot()


@pytest.fixture
def left_foot():
    return ContactInformation("l_foot", [[0., 0., 0.]], name="left_foot")


@pytest.fixture
def right_foot():
    return ContactInformation("r_foot", [[0., 0., 0.]], name="right_foot")


@pytest.fixture
def standing_input(robot, left_foot, right_foot):
    qp_input = QPInput(robot.nv)
    qp_input.set_contact_info([left_foot, right_foot])
    return qp_input
