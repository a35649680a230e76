"""
@file demo_biped_standing.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10

Simple demo of the QP controller balancing the biped on both feet. The
resulting accelerations are integrated kinematically, no simulator needed.
"""


import os
import sys
import inspect
import numpy as np

from humanoid_wbc.yaml_parser import load_yaml
from humanoid_wbc.controller_setting import ControllerSetting
from humanoid_wbc.robot_wrapper import RobotWrapper
from humanoid_wbc.geometry import positionPD, rotationPD
from humanoid_wbc.qp_controller import QPController, ControlResult
from humanoid_wbc.qp_input import QPInput, DesiredBodyAcceleration
from humanoid_wbc.qp_output import QPOutput


# absolute directory of this package
rootdir = os.path.dirname(os.path.dirname(
        os.path.abspath(inspect.getfile(inspect.currentframe()))))


def main(argv):
    # Load configuration file
    if len(argv) == 0:
        cfg_file = "/config/biped_standing.yaml"
    elif len(argv) == 1:
        cfg_file = argv[0]
    else:
        raise RuntimeError("Usage: python3 ./demo.py /<config file within root folder>")

    configs = load_yaml(rootdir + cfg_file)
    timestep = configs["timestep"]
    duration = configs["duration"]

    ctrl_setting = ControllerSetting()
    ctrl_setting.initialize(rootdir, cfg_file)
    robwrapper = RobotWrapper(ctrl_setting)
    controller = QPController.from_setting(ctrl_setting)

    # Lower the com a little and keep the torso upright
    des_com_pos = robwrapper.get_com_position().copy() + ctrl_setting.com_offset
    des_base_rot = np.identity(3)

    qp_input = QPInput(robwrapper.nv)
    qp_input.w_com = ctrl_setting.w_com
    qp_input.w_vd = ctrl_setting.w_vd
    qp_input.w_basis_reg = ctrl_setting.w_basis_reg
    qp_input.set_contact_info(
        [ctrl_setting.get_contact_info(name) for name in ctrl_setting.contact_names])
    output = QPOutput()

    q, v = robwrapper.get_state()
    q, v = q.copy(), v.copy()
    num_steps = int(duration / timestep)
    for step in range(num_steps):
        comdd = positionPD(des_com_pos, robwrapper.get_com_position(),
                           cur_vel=robwrapper.get_com_velocity(),
                           kp=ctrl_setting.kp_com_pos, kd=ctrl_setting.kd_com_pos)
        qp_input.set_desired_comdd(comdd)

        base_vel = robwrapper.get_frame_velocity_world_aligned(ctrl_setting.base_name)
        base_pose = robwrapper.get_frame_pose(ctrl_setting.base_name)
        base_acc = np.zeros(6)
        base_acc[3:6] = rotationPD(des_base_rot, base_pose.rotation,
                                   cur_omega=base_vel.angular,
                                   kp=ctrl_setting.kp_base_orn, kd=ctrl_setting.kd_base_orn)
        base_acc[0:3] = comdd
        qp_input.set_desired_body_accelerations([DesiredBodyAcceleration(
            ctrl_setting.base_name, base_acc, ctrl_setting.w_base_orn)])

        result = controller.control(robwrapper, qp_input, output)
        if result != ControlResult.SUCCESS:
            print("Control failed at step %d: %s" % (step, result.name))
            print(qp_input)
            break
        if step == 0:
            print(qp_input)
            print(output)

        # Integrate the accelerations
        v = v + output.vd * timestep
        q = robwrapper.integrate(q, v * timestep)
        robwrapper.set_configuration(q, v)

        if step % 100 == 0:
            total_normal_force = sum(c.force[2] for c in output.resolved_contacts)
            print("t = %.3f com: %s normal force: %.2f torque: %s" % (
                step * timestep, robwrapper.get_com_position(),
                total_normal_force, output.joint_torque))

    print("com error: %s" % (des_com_pos - robwrapper.get_com_position()))
    print("Demo completed.")

if __name__ == '__main__':
    main(sys.argv[1:])
