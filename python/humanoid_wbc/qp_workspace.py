"""
@file qp_workspace.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10
"""

import numpy as np

class QPWorkspace:
    """Scratch matrices of one controller, sized by resize() when the QP
    topology changes and reset by set_zero() at the start of every cycle.
    """
    def __init__(self):
        self.resize(0, 0, 0, 0, [])

    def resize(self, num_vd, num_basis, num_point_force, num_torque, body_acceleration_dims):
        num_variable = num_vd + num_basis
        self.stacked_contact_jacobians = np.zeros((3 * num_point_force, num_vd))
        self.stacked_contact_jacobians_dot_times_v = np.zeros(3 * num_point_force)
        self.basis_to_force_matrix = np.zeros((3 * num_point_force, num_basis))
        self.JB = np.zeros((num_vd, num_basis))
        self.torque_linear = np.zeros((num_torque, num_variable))
        self.torque_constant = np.zeros(num_torque)
        self.dynamics_linear = np.zeros((6, num_variable))
        self.dynamics_constant = np.zeros(6)
        self.inequality_linear = np.zeros((num_torque, num_variable))
        self.inequality_lower_bound = np.zeros(num_torque)
        self.inequality_upper_bound = np.zeros(num_torque)
        self.point_forces = np.zeros(3 * num_point_force)
        self.com_J = np.zeros((3, num_vd))
        self.com_Jdv = np.zeros(3)
        self.body_J = [np.zeros((dim, num_vd)) for dim in body_acceleration_dims]
        self.body_Jdv = [np.zeros(dim) for dim in body_acceleration_dims]

    def set_zero(self):
        for value in self.__dict__.values():
            if isinstance(value, list):
                for item in value:
                    item.fill(0.)
            else:
                value.fill(0.)
