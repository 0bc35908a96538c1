"""Actuators the controller can pause and resume.

Usage:
    from perfguard.actuators import locate_process_actuator

    actuator = locate_process_actuator("ffmpeg")  # or a PID
    if actuator:
        actuator.pause()
"""

from perfguard.actuators.base import BaseActuator
from perfguard.actuators.process import ProcessActuator, locate_process_actuator

__all__ = [
    "BaseActuator",
    "ProcessActuator",
    "locate_process_actuator",
]
