"""Run external command-line tools (kubectl, helm, docker) and capture their output."""

from __future__ import annotations

import shlex
import shutil
import subprocess
from collections.abc import Sequence

import structlog

log = structlog.get_logger()


def find_binary(binary: str) -> str:
    """Locate a binary on PATH.

    Raises:
        FileNotFoundError: If the binary is not installed.
    """
    path = shutil.which(binary)
    if path is None:
        msg = f"{binary} not found. Install it and make sure it is on your PATH."
        raise FileNotFoundError(msg)
    return path


def call_cli(
    binary: str,
    args: str | Sequence[str],
    echo: bool = True,
    input_text: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run ``binary`` with ``args`` and return the completed process.

    ``args`` may be a single command-line string, which is split shell-style.
    A non-zero exit status raises ``subprocess.CalledProcessError`` carrying
    the captured stdout and stderr.
    """
    argv = shlex.split(args) if isinstance(args, str) else list(args)
    cmd = [find_binary(binary), *argv]
    if echo:
        log.info("cli_command", binary=binary, args=argv)

    result = subprocess.run(cmd, capture_output=True, text=True, input=input_text, check=False)
    if result.returncode != 0:
        log.error("cli_command_failed", binary=binary, returncode=result.returncode, stderr=result.stderr.strip())
        raise subprocess.CalledProcessError(result.returncode, cmd, output=result.stdout, stderr=result.stderr)
    return result
