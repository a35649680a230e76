"""
@file qp_input.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10
"""

import numpy as np

def _is_weight(w):
    return np.isscalar(w) and np.isfinite(w) and w >= 0

class DesiredBodyAcceleration:
    """Desired acceleration of a body frame in the world aligned frame.

    A 6 dimensional acceleration is the spatial acceleration [linear; angular],
    a 3 dimensional one only constrains the linear part.
    """
    def __init__(self, body, acceleration, weight=1., name=None):
        self.body = body
        self.name = body if name is None else name
        self.acceleration = np.array(acceleration, dtype=float)
        self.weight = weight

    @property
    def dim(self):
        return self.acceleration.shape[0]

    def is_valid(self):
        return (self.acceleration.ndim == 1 and self.dim in (3, 6) and
                np.all(np.isfinite(self.acceleration)) and _is_weight(self.weight))


class QPInput:
    """Everything the QP controller needs from the high-level planner for one
    control cycle: task-space targets, their weights and the active contacts.
    """
    def __init__(self, num_vd=0):
        self.des_comdd = np.zeros(3)
        self.des_body_accelerations = []
        self.des_vd = np.zeros(num_vd)
        self.des_contact_info = []
        self.w_com = 1.
        self.w_vd = 1e-3
        self.w_basis_reg = 1e-6

    def set_desired_comdd(self, des_comdd):
        self.des_comdd = np.array(des_comdd, dtype=float)

    def set_desired_vd(self, des_vd):
        self.des_vd = np.array(des_vd, dtype=float)

    def set_desired_body_accelerations(self, des_body_accelerations=None):
        self.des_body_accelerations = list(des_body_accelerations or [])

    def add_desired_body_acceleration(self, des_body_acceleration):
        self.des_body_accelerations.append(des_body_acceleration)

    def set_contact_info(self, contact_info=None):
        self.des_contact_info = list(contact_info or [])

    def add_contact_info(self, contact_info):
        self.des_contact_info.append(contact_info)

    @property
    def desired_comdd(self):
        return self.des_comdd

    @property
    def desired_vd(self):
        return self.des_vd

    @property
    def desired_body_accelerations(self):
        return self.des_body_accelerations

    @property
    def contact_info(self):
        return self.des_contact_info

    def is_valid(self, num_vd):
        """Check the input against a model with num_vd generalized velocities."""
        if self.des_vd.ndim != 1 or self.des_vd.shape[0] != num_vd:
            return False
        if not np.all(np.isfinite(self.des_vd)):
            return False
        if self.des_comdd.shape != (3,) or not np.all(np.isfinite(self.des_comdd)):
            return False
        for w in (self.w_com, self.w_vd, self.w_basis_reg):
            if not _is_weight(w):
                return False
        for body_acceleration in self.des_body_accelerations:
            if not body_acceleration.is_valid():
                return False
        names = [contact.name for contact in self.des_contact_info]
        if len(set(names)) != len(names):
            return False
        return True

    def __str__(self):
        lines = ["===============================================", "QPInput:"]
        lines.append("desired_comdd: %s" % self.des_comdd)
        for body_acceleration in self.des_body_accelerations:
            lines.append("%s_d: %s" % (body_acceleration.name, body_acceleration.acceleration))
        lines.append("desired_vd: %s" % self.des_vd)
        lines.append("w_com: %g" % self.w_com)
        for body_acceleration in self.des_body_accelerations:
            lines.append("w_%s: %g" % (body_acceleration.name, body_acceleration.weight))
        lines.append("w_vd: %g" % self.w_vd)
        lines.append("w_basis_reg: %g" % self.w_basis_reg)
        lines.append("contacts: %s" % ", ".join(c.name for c in self.des_contact_info))
        return "\n".join(lines)
