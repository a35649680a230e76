"""
@file robot_wrapper.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10
"""

import numpy as np
import pinocchio as pin
from pinocchio.utils import zero
from humanoid_wbc.geometry import vec_to_so3

class RobotWrapper:
    """Kinematics and dynamics of a floating base robot built with pinocchio.

    All spatial quantities are [linear; angular] and expressed in the local
    world aligned frame. Every non floating base degree of freedom is assumed
    to be actuated.
    """
    def __init__(self, setting):
        self.urdf_filename = setting.urdf_filename
        self.joint_names = setting.joint_names
        self.contact_frames = setting.contact_frames
        self.joint_init_pos = np.array(setting.joint_init_pos, dtype=float)
        self.joint_init_vel = np.array(setting.joint_init_vel, dtype=float)

        self.model = pin.buildModelFromUrdf(
            self.urdf_filename, pin.JointModelFreeFlyer())
        self.data = self.model.createData()

        self.nq = self.model.nq
        self.nv = self.model.nv
        self.num_actuators = self.nv - 6
        self.total_mass = pin.computeTotalMass(self.model)

        self.pin_joint_name_id_map = {}
        self.pin_joint_id_name_map = {}
        for name in self.joint_names:
            if not self.model.existJointName(name):
                raise ValueError("Joint %s is not available." %name)
            ji = self.model.getJointId(name)
            self.pin_joint_id_name_map[ji] = name
            self.pin_joint_name_id_map[name] = ji

        self.velocity_names = ["base_vx", "base_vy", "base_vz",
                               "base_wx", "base_wy", "base_wz"]
        for ji in range(2, self.model.njoints):
            name, nv_j = self.model.names[ji], self.model.joints[ji].nv
            if nv_j == 1:
                self.velocity_names.append(name)
            else:
                self.velocity_names += ["%s_%d" % (name, k) for k in range(nv_j)]

        self.q = pin.neutral(self.model)
        self.v = zero(self.nv)
        self.a_zero = zero(self.nv)

        # put the contact frames on the ground
        self.set_state(np.array([0., 0., 0., 0., 0., 0., 1.]), np.zeros(6),
                       self.joint_init_pos, self.joint_init_vel)
        heights = [self.get_frame_position(name)[2] for name in self.contact_frames]
        if len(heights):
            base_pos = self.q[0:7].copy()
            base_pos[2] = - sum(heights)/len(heights)
            self.set_state(base_pos, np.zeros(6), self.joint_init_pos, self.joint_init_vel)

    def set_state(self, base_pos, base_vel, joint_pos, joint_vel):
        """Set the robot to the desired states and update all the dynamics
        quantities. Note that the base velocities are expressed in the base
        frame.

        Args:
            base_pos (ndarray): Desired base posture [px,py,pz,qx,qy,qz,qw].
            base_vel (ndarray): Desired base velocity [vx,vy,vz,wx,wy,wz].
            joint_pos (ndarray): Desired joint positions.
            joint_vel (ndarray): Desired joint velocities.
        """
        self.q[0:7] = base_pos
        self.v[0:6] = base_vel
        for ji, jn in enumerate(self.joint_names):
            joint = self.model.joints[self.pin_joint_name_id_map[jn]]
            self.q[joint.idx_q] = joint_pos[ji]
            self.v[joint.idx_v] = joint_vel[ji]
        self.update()

    def set_configuration(self, q, v):
        self.q[:] = q
        self.v[:] = v
        self.update()

    def update(self):
        # Computes efficiently the mass matrix, the nonlinear effects, the
        # joint jacobians, the center of mass and its jacobian and the
        # centroidal momentum matrix.
        pin.computeAllTerms(self.model, self.data, self.q, self.v)
        self.M = np.triu(self.data.M) + np.triu(self.data.M, 1).T
        self.Ag = pin.computeCentroidalMap(self.model, self.data, self.q).copy()
        # With zero acceleration the time variation of the centroidal momentum
        # is dAg * v, the com acceleration is dJcom * v and data.a holds the
        # drift accelerations used by the frame Jdot * v terms.
        pin.computeCentroidalMomentumTimeVariation(
            self.model, self.data, self.q, self.v, self.a_zero)
        self.dAg_v = self.data.dhg.vector.copy()
        pin.centerOfMass(self.model, self.data, self.q, self.v, self.a_zero)
        pin.updateFramePlacements(self.model, self.data)

    def get_state(self):
        """Get the robot's position and velocity.

        Returns:
            pos (ndarray): Robot positions.
            vel (ndarray): Robot velocities.
        """
        return self.q, self.v

    def integrate(self, cur_q, v):
        """Integrate a configuration vector for a tangent vector during one unit time.

        Args:
            v (ndarray): Tangent vector.

        Return:
            q (ndarray): Updated configuration vector.
        """
        return pin.integrate(self.model, cur_q, v)

    def get_inertia_matrix(self):
        """Get the joint-space inertia matrix."""
        return self.M

    def get_nonlinear_effects(self):
        """Get nonlinear effects corresponding to concatenation of the coriolis,
        centrifugal and gravitational effects.
        """
        return self.data.nle

    def get_total_mass(self):
        return self.total_mass

    def get_gravity(self):
        return self.model.gravity.linear.copy()

    def get_effort_limits(self):
        """Lower and upper actuator effort limits."""
        limits = np.asarray(self.model.effortLimit)[-self.num_actuators:]
        return -limits, limits

    def get_actuator_selection_matrix(self):
        """Map from actuator efforts to generalized forces."""
        B = np.zeros((self.nv, self.num_actuators))
        B[6:, :] = np.identity(self.num_actuators)
        return B

    def get_com_position(self):
        """Vector of absolute com position.
        """
        return self.data.com[0]

    def get_com_velocity(self):
        """Vector of absolute com velocity.
        """
        return self.data.vcom[0]

    def get_com_jacobian(self):
        """Jacobian of the com position expressed in the world frame."""
        return self.data.Jcom

    def get_com_jacobian_dot_times_v(self):
        """Com acceleration with zero generalized acceleration."""
        return self.data.acom[0]

    def get_centroidal_momentum_matrix(self):
        """Map from generalized velocity to the [linear; angular] momentum
        about the com.
        """
        return self.Ag

    def get_centroidal_momentum_matrix_dot_times_v(self):
        return self.dAg_v

    def _get_frame_id(self, name):
        if not self.model.existFrame(name):
            raise ValueError("Frame %s is not available." %name)
        if name == "universe" or name == "root_joint":
            raise ValueError("Frame %s is not available." %name)
        return self.model.getFrameId(name)

    def get_frame_pose(self, name):
        """Absolute placement of a frame.

        Args:
            name (:obj:`str`): Frame name.
        """
        return self.data.oMf[self._get_frame_id(name)]

    def get_frame_position(self, name):
        return self.get_frame_pose(name).translation

    def get_frame_rotation(self, name):
        return self.get_frame_pose(name).rotation

    def get_frame_velocity_world_aligned(self, name):
        """Express frame velocity in local world aligned coordinate system
        centered on the moving part but with axes aligned with the frame of the
        Universe.
        """
        return pin.getFrameVelocity(
            self.model, self.data, self._get_frame_id(name),
            pin.ReferenceFrame.LOCAL_WORLD_ALIGNED)

    def get_frame_jacobian_world_aligned(self, name):
        """Express frame jacobian in local world aligned coordinate system
        centered on the moving part but with axes aligned with the frame of the
        Universe.

        Args:
            name (:obj:`str`): Frame name.
        """
        return pin.getFrameJacobian(
            self.model, self.data, self._get_frame_id(name),
            pin.ReferenceFrame.LOCAL_WORLD_ALIGNED)

    def get_frame_jacobian_dot_times_v_world_aligned(self, name):
        """Classical acceleration [linear; angular] of a frame for zero
        generalized acceleration, i.e. dJ * v of the world aligned jacobian.

        Args:
            name (:obj:`str`): Frame name.
        """
        return pin.getFrameClassicalAcceleration(
            self.model, self.data, self._get_frame_id(name),
            pin.ReferenceFrame.LOCAL_WORLD_ALIGNED).vector

    def get_point_jacobian_world_aligned(self, name, point):
        """Linear jacobian of a point fixed in a frame.

        Args:
            name (:obj:`str`): Frame name.
            point (ndarray): Point expressed in the frame.
        """
        J = self.get_frame_jacobian_world_aligned(name)
        offset = self.get_frame_rotation(name).dot(point)
        return J[0:3] - vec_to_so3(offset).dot(J[3:6])

    def get_point_jacobian_dot_times_v_world_aligned(self, name, point):
        """Linear acceleration of a point fixed in a frame for zero
        generalized acceleration.

        Args:
            name (:obj:`str`): Frame name.
            point (ndarray): Point expressed in the frame.
        """
        drift = self.get_frame_jacobian_dot_times_v_world_aligned(name)
        omega = self.get_frame_velocity_world_aligned(name).angular
        offset = self.get_frame_rotation(name).dot(point)
        return (drift[0:3] + np.cross(drift[3:6], offset) +
                np.cross(omega, np.cross(omega, offset)))
