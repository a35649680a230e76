"""
@file qp_output.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10
"""

import numpy as np

class BodyAcceleration:
    """Acceleration of a tracked body resulting from the solved vd."""
    def __init__(self, body, name=None):
        self.body = body
        self.name = body if name is None else name
        self.acceleration = np.zeros(6)


class QPOutput:
    """Result of one control cycle.

    Attributes:
        vd (ndarray): Generalized accelerations.
        comdd (ndarray): CoM acceleration.
        joint_torque (ndarray): Torques of the actuated coordinates.
        resolved_contacts (list): One ResolvedContact per active contact.
        body_accelerations (list): One BodyAcceleration per tracked body.
        costs (list): (description, value) pairs of every cost term.
        coord_names (list): Names of the generalized velocity coordinates.
    """
    def __init__(self, coord_names=None):
        self.coord_names = list(coord_names or [])
        self.vd = np.zeros(len(self.coord_names))
        self.comdd = np.zeros(3)
        self.joint_torque = np.zeros(0)
        self.resolved_contacts = []
        self.body_accelerations = []
        self.costs = []

    def coord_name(self, idx):
        if idx < len(self.coord_names):
            return self.coord_names[idx]
        return "v%d" % idx

    def cost(self, description):
        for desc, value in self.costs:
            if desc == description:
                return value
        raise KeyError(description)

    def assign(self, other):
        """Take over every field of other."""
        self.__dict__.update(other.__dict__)

    def is_valid(self, num_vd, num_torque):
        if self.vd.shape != (num_vd,) or not np.all(np.isfinite(self.vd)):
            return False
        if self.comdd.shape != (3,) or not np.all(np.isfinite(self.comdd)):
            return False
        if (self.joint_torque.shape != (num_torque,) or
                not np.all(np.isfinite(self.joint_torque))):
            return False
        for contact in self.resolved_contacts:
            if len(contact.point_forces) != contact.num_contact_points:
                return False
            if contact.equivalent_wrench.shape != (6,):
                return False
            if not np.all(np.isfinite(contact.equivalent_wrench)):
                return False
        for body_acceleration in self.body_accelerations:
            if not np.all(np.isfinite(body_acceleration.acceleration)):
                return False
        return True

    def __str__(self):
        sep = "==============================================="
        lines = [sep, "QPOutput:", "accelerations:"]
        for i, vd in enumerate(self.vd):
            lines.append("%s: %g" % (self.coord_name(i), vd))
        lines.append("com acc: %s" % self.comdd)
        for body_acceleration in self.body_accelerations:
            lines.append("%s acc: %s" % (body_acceleration.name, body_acceleration.acceleration))
        lines.append(sep)
        for contact in self.resolved_contacts:
            lines.append("%s wrench: %s" % (contact.name, contact.equivalent_wrench))
            lines.append("point forces:")
            for force in contact.point_forces:
                lines.append("%s" % force)
        lines.append(sep)
        lines.append("torque:")
        num_unactuated = len(self.vd) - len(self.joint_torque)
        for i, tau in enumerate(self.joint_torque):
            lines.append("%s: %g" % (self.coord_name(i + num_unactuated), tau))
        lines.append(sep)
        lines.append("costs:")
        for desc, value in self.costs:
            lines.append("%s: %g" % (desc, value))
        return "\n".join(lines)
