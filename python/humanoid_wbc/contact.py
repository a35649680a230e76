"""
@file contact.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10
"""

import numpy as np
from scipy.linalg import block_diag
from humanoid_wbc.geometry import friction_cone_basis, wrench_matrix

class ContactInformation:
    """A body in contact with the environment through a set of contact points.

    The contact force at every point is a non-negative combination of the
    edges of a discretized friction cone, so the decision variables of the QP
    are the edge coefficients (basis) rather than the point forces.

    Args:
        body (str): Frame name of the contacting body.
        contact_points (list): Contact points expressed in the body frame.
        num_basis_per_contact_point (int): Friction cone edges per point.
        mu (float): Friction coefficient.
        normal (ndarray): Contact normal in the body frame.
        reference_point (ndarray): Body frame point the equivalent wrench is
            expressed about.
        name (str): Label used in constraint descriptions and dumps.
    """
    def __init__(self, body, contact_points, num_basis_per_contact_point=4,
                 mu=1., normal=(0., 0., 1.), reference_point=(0., 0., 0.),
                 name=None):
        self.body = body
        self.name = body if name is None else name
        self.contact_points = [np.array(p, dtype=float) for p in contact_points]
        self.num_basis_per_contact_point = int(num_basis_per_contact_point)
        self.mu = float(mu)
        self.normal = np.array(normal, dtype=float)
        self.reference_point = np.array(reference_point, dtype=float)

        if len(self.contact_points) == 0:
            raise ValueError("Contact %s has no contact point." % self.name)
        for point in self.contact_points:
            if point.shape != (3,):
                raise ValueError(
                    "Contact %s: contact points must be 3-vectors." % self.name)
        if self.num_basis_per_contact_point < 1:
            raise ValueError(
                "Contact %s needs at least one basis per contact point." % self.name)
        if self.mu < 0:
            raise ValueError("Contact %s has a negative friction coefficient." % self.name)
        if self.normal.shape != (3,) or np.linalg.norm(self.normal) < 1e-9:
            raise ValueError("Contact %s has an invalid normal." % self.name)

    @property
    def num_contact_points(self):
        return len(self.contact_points)

    @property
    def num_basis(self):
        return self.num_contact_points * self.num_basis_per_contact_point

    @property
    def force_dim(self):
        return 3 * self.num_contact_points

    def compute_contact_points_and_reference_point(self, robot):
        """Contact points and wrench reference point in the world frame."""
        pos = robot.get_frame_position(self.body)
        rot = robot.get_frame_rotation(self.body)
        points = [pos + rot.dot(p) for p in self.contact_points]
        reference_point = pos + rot.dot(self.reference_point)
        return points, reference_point

    def compute_jacobian_at_contact_points(self, robot):
        """Stacked (3 * num_contact_points) x nv linear Jacobian of the
        contact points, world aligned."""
        return np.vstack([
            robot.get_point_jacobian_world_aligned(self.body, p)
            for p in self.contact_points])

    def compute_jacobian_dot_times_v_at_contact_points(self, robot):
        return np.hstack([
            robot.get_point_jacobian_dot_times_v_world_aligned(self.body, p)
            for p in self.contact_points])

    def compute_basis_matrix(self, robot):
        """Block diagonal (3 * num_contact_points) x num_basis matrix mapping
        basis coefficients to world frame point forces."""
        normal = robot.get_frame_rotation(self.body).dot(self.normal)
        cone = friction_cone_basis(normal, self.mu, self.num_basis_per_contact_point)
        return block_diag(*([cone] * self.num_contact_points))

    def compute_wrench_matrix(self, points, reference_point):
        return wrench_matrix(points, reference_point)


class ResolvedContact:
    """Contact forces recovered from the QP solution for one contact body."""
    def __init__(self, body, name=None):
        self.body = body
        self.name = body if name is None else name
        self.basis = np.zeros(0)
        self.point_forces = []
        self.equivalent_wrench = np.zeros(6)
        self.contact_points = []
        self.reference_point = np.zeros(3)

    @property
    def num_contact_points(self):
        return len(self.contact_points)

    @property
    def force(self):
        return self.equivalent_wrench[0:3]

    @property
    def torque(self):
        return self.equivalent_wrench[3:6]
