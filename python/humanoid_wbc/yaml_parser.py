"""
@file yaml_parser.py
@package humanoid_wbc
@author Xinyuan Liu (liuxinyuan872@gmail.com)
@license License BSD-3-Clause
@Copyright (c) 2026, Harbin Institute of Technology.
@date 2026-10
"""

import yaml

def load_yaml(filename):
    """Load a yaml configuration file.

    Args:
        filename (str): Path of the file.
    Returns:
        The parsed content as nested dicts and lists.
    """
    with open(filename, 'r') as f:
        configs = yaml.safe_load(f)
    if configs is None:
        raise ValueError("Configuration file %s is empty." % filename)
    return configs
