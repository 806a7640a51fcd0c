"""
meshguard/cluster/kubectl.py
Thin subprocess wrapper around the kubectl binary.
"""

from __future__ import annotations

import json
import logging
import subprocess
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class KubectlError(Exception):
    """kubectl could not be started, timed out or exited non-zero."""

    def __init__(self, cmd: List[str], message: str, returncode: Optional[int] = None, stderr: str = ""):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class Kubectl:
    def __init__(self, binary: str = "kubectl", context: Optional[str] = None, timeout: float = 60.0):
        self.binary = binary
        self.context = context
        self.timeout = timeout

    def _command(self, args: List[str], namespace: Optional[str]) -> List[str]:
        cmd = [self.binary]
        if self.context:
            cmd.extend(["--context", self.context])
        if namespace:
            cmd.extend(["-n", namespace])
        cmd.extend(args)
        return cmd

    def run(self, *args: str, namespace: Optional[str] = None, input: Optional[str] = None) -> str:
        cmd = self._command(list(args), namespace)
        logger.debug("Executing: %s", " ".join(cmd))

        try:
            proc = subprocess.run(
                cmd,
                input=input,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise KubectlError(cmd, f"{self.binary} NOT INSTALLED or not in PATH") from None
        except subprocess.TimeoutExpired as e:
            raise KubectlError(cmd, f"{self.binary} timed out after {self.timeout}s") from e

        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip()
            raise KubectlError(
                cmd,
                f"{' '.join(args[:2])} exited with status {proc.returncode}: {stderr}",
                returncode=proc.returncode,
                stderr=stderr,
            )
        return proc.stdout

    def get_json(self, kind: str, name: str, namespace: Optional[str] = None) -> Dict[str, Any]:
        out = self.run("get", kind, name, "-o", "json", namespace=namespace)
        try:
            return json.loads(out)
        except json.JSONDecodeError as e:
            raise KubectlError(self._command(["get", kind, name], namespace), f"unparseable kubectl output: {e}") from e
