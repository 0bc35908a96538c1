"""Actuator that suspends and resumes an OS process."""

import logging
import os
from typing import Optional, Union

import psutil

from perfguard.actuators.base import BaseActuator
from perfguard.core.interfaces import CommandResult

logger = logging.getLogger(__name__)


class ProcessActuator(BaseActuator):
    """Pauses a background process with SIGSTOP-style suspension.

    A located process is ready immediately; there is no warm-up to wait for.
    """

    def __init__(self, process: psutil.Process):
        super().__init__(ready=True)
        self.process = process

    def _is_suspended(self) -> bool:
        return self.process.status() == psutil.STATUS_STOPPED

    def pause(self) -> CommandResult:
        try:
            if self._is_suspended():
                return CommandResult.already("process already suspended")
            self.process.suspend()
            logger.info(f"Suspended {self.describe()}")
            return CommandResult.success()
        except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
            return CommandResult.failed(f"{type(e).__name__}: {e}")

    def resume(self) -> CommandResult:
        try:
            if not self._is_suspended():
                return CommandResult.already("process not suspended")
            self.process.resume()
            logger.info(f"Resumed {self.describe()}")
            return CommandResult.success()
        except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
            return CommandResult.failed(f"{type(e).__name__}: {e}")

    def describe(self) -> str:
        try:
            name = self.process.name()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            name = "?"
        return f"process {name} (pid {self.process.pid})"


def locate_process_actuator(selector: Union[str, int]) -> Optional[ProcessActuator]:
    """Find a process by PID or by name (case-insensitive).

    The current process is never matched.
    """
    own_pid = os.getpid()

    pid: Optional[int] = None
    if isinstance(selector, int):
        pid = selector
    elif isinstance(selector, str) and selector.strip().isdigit():
        pid = int(selector.strip())

    if pid is not None:
        if pid == own_pid:
            return None
        try:
            return ProcessActuator(psutil.Process(pid))
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return None

    wanted = str(selector).strip().lower()
    for proc in psutil.process_iter(['name']):
        try:
            proc_name = proc.info['name']
            if proc.pid != own_pid and proc_name and proc_name.lower() == wanted:
                return ProcessActuator(proc)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue

    return None
