"""
Verify every module in the package imports without errors.
"""

import importlib
import pkgutil

import pytest

import violin_tuner

# These need the PortAudio library, which test machines may not have
HARDWARE_MODULES = {"violin_tuner.audio.audio_input", "violin_tuner.audio.tone_player"}


def find_modules():
    return sorted(
        info.name
        for info in pkgutil.walk_packages(violin_tuner.__path__, "violin_tuner.")
        if info.name not in HARDWARE_MODULES
    )


@pytest.mark.parametrize("module_name", find_modules())
def test_module_imports(module_name):
    assert importlib.import_module(module_name) is not None
