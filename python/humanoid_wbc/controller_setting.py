"""
@file controller_setting.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10
"""

import logging
import numpy as np
from humanoid_wbc.contact import ContactInformation
from humanoid_wbc.yaml_parser import load_yaml

logger = logging.getLogger(__name__)

class ControllerSetting:

    def __init__(self):
        self.urdf_filename = None
        self.base_name = None
        self.joint_names = []
        self.joint_init_pos = np.zeros(len(self.joint_names))
        self.joint_init_vel = np.zeros(len(self.joint_names))
        self.contact_names = []
        self.contact_frames = []
        self.contact_points = []
        self.num_basis_per_contact_point = 4
        self.fric_coef = 1.
        self.timestep = 0.002

        self.solver = "quadprog"
        self.basis_upper_bound = 1000.
        self.tolerance = 1e-6
        self.assert_consistency = False

        self.w_com = 1.
        self.w_vd = 1e-3
        self.w_basis_reg = 1e-6
        self.w_base_orn = 1.
        self.kp_com_pos = np.zeros(3)
        self.kd_com_pos = np.zeros(3)
        self.kp_base_orn = np.zeros(3)
        self.kd_base_orn = np.zeros(3)
        self.com_offset = np.zeros(3)

    def initialize(self, rootdir, cfg_file, ctrl_vars_yaml="controller_variables",
                   plan_vars_yaml="planner_variables"):
        configs = load_yaml(rootdir + cfg_file)
        ctrl_vars = configs[ctrl_vars_yaml]
        self.urdf_filename = rootdir + ctrl_vars["urdf_filename"]
        logger.info("ControllerSetting: urdf_filename: %s", self.urdf_filename)
        self.base_name = ctrl_vars["base_name"]
        self.joint_names = ctrl_vars["joint_names"]
        self.joint_init_pos = np.array(ctrl_vars["joint_init_pos"], dtype=float)
        self.joint_init_vel = np.array(ctrl_vars["joint_init_vel"], dtype=float)
        self.contact_names = ctrl_vars["contact_names"]
        self.contact_frames = ctrl_vars["contact_frames"]
        self.contact_points = [np.array(points, dtype=float).reshape(-1, 3)
                               for points in ctrl_vars["contact_points"]]
        self.num_basis_per_contact_point = ctrl_vars["num_basis_per_contact_point"]
        self.fric_coef = ctrl_vars["fric_coef"]
        self.timestep = ctrl_vars["timestep"]

        self.solver = ctrl_vars.get("solver", self.solver)
        self.basis_upper_bound = float(ctrl_vars.get("basis_upper_bound", self.basis_upper_bound))
        self.tolerance = float(ctrl_vars.get("tolerance", self.tolerance))
        self.assert_consistency = bool(ctrl_vars.get("assert_consistency", self.assert_consistency))

        if not (len(self.contact_names) == len(self.contact_frames) == len(self.contact_points)):
            raise ValueError("contact_names, contact_frames and contact_points "
                             "must have the same length.")
        if len(self.joint_init_pos) != len(self.joint_names):
            raise ValueError("joint_init_pos must have one entry per joint.")

        if plan_vars_yaml in configs:
            plan_vars = configs[plan_vars_yaml]
            self.w_com = float(plan_vars["w_com"])
            self.w_vd = float(plan_vars["w_vd"])
            self.w_basis_reg = float(plan_vars["w_basis_reg"])
            self.w_base_orn = float(plan_vars["w_base_orn"])
            self.kp_com_pos = np.array(plan_vars["kp_com_pos"], dtype=float)
            self.kd_com_pos = np.array(plan_vars["kd_com_pos"], dtype=float)
            self.kp_base_orn = np.array(plan_vars["kp_base_orn"], dtype=float)
            self.kd_base_orn = np.array(plan_vars["kd_base_orn"], dtype=float)
            self.com_offset = np.array(plan_vars["com_offset"], dtype=float)

    def get_contact_info(self, contact_name):
        """Build the ContactInformation of a configured contact.

        Args:
            contact_name (str): One of contact_names.
        """
        if contact_name not in self.contact_names:
            raise ValueError("Contact %s is not configured." % contact_name)
        idx = self.contact_names.index(contact_name)
        return ContactInformation(self.contact_frames[idx], self.contact_points[idx],
                                  num_basis_per_contact_point=self.num_basis_per_contact_point,
                                  mu=self.fric_coef, name=contact_name)
