import numpy as np
import pytest
import yaml

from humanoid_wbc.controller_setting import ControllerSetting
from humanoid_wbc.qp_controller import QPController
from humanoid_wbc.yaml_parser import load_yaml


@pytest.fixture
def setting(rootdir):
    setting = ControllerSetting()
    setting.initialize(rootdir, "/config/biped_standing.yaml")
    return setting


class TestControllerSetting:
    def test_controller_variables(self, setting, rootdir):
        assert setting.urdf_filename == rootdir + "/models/biped.urdf"
        assert setting.base_name == "torso"
        assert len(setting.joint_names) == 6
        assert setting.joint_init_pos.shape == (6,)
        assert setting.contact_frames == ["l_foot", "r_foot"]
        assert setting.contact_points[0].shape == (4, 3)
        assert setting.solver == "quadprog"
        assert setting.tolerance == 1e-6
        assert setting.assert_consistency is False

    def test_planner_variables(self, setting):
        assert setting.w_vd == 1e-3
        assert np.allclose(setting.kp_com_pos, 50.)

    def test_contact_info(self, setting):
        contact = setting.get_contact_info("right_foot")
        assert contact.name == "right_foot"
        assert contact.body == "r_foot"
        assert contact.num_basis_per_contact_point == 4
        assert contact.mu == 1.
        with pytest.raises(ValueError):
            setting.get_contact_info("left_hand")

    def test_controller_from_setting(self, setting):
        controller = QPController.from_setting(setting)
        assert controller.qp_solver.solver == "quadprog"
        assert controller.basis_upper_bound == 1000.
        assert controller.tolerance == 1e-6

    def test_mismatched_contacts(self, rootdir, tmp_path):
        configs = load_yaml(rootdir + "/config/biped_standing.yaml")
        configs["controller_variables"]["contact_frames"] = ["l_foot"]
        cfg_file = tmp_path / "bad.yaml"
        cfg_file.write_text(yaml.safe_dump(configs))
        with pytest.raises(ValueError):
            ControllerSetting().initialize(str(tmp_path), "/bad.yaml")


class TestLoadYaml:
    def test_empty_file(self, tmp_path):
        cfg_file = tmp_path / "empty.yaml"
        cfg_file.write_text("")
        with pytest.raises(ValueError):
            load_yaml(str(cfg_file))
