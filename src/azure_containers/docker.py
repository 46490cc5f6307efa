"""Local docker engine wrapper."""

from __future__ import annotations

import subprocess

from azure_containers.cli_tools import call_cli


class DockerEngine:
    """Runs docker commands against the local engine."""

    def docker(self, cmd: str | list[str], input_text: str | None = None) -> subprocess.CompletedProcess[str]:
        return call_cli("docker", cmd, input_text=input_text)

    def build(self, file: str, image: str, context: str = ".") -> subprocess.CompletedProcess[str]:
        return self.docker(["build", "-t", image, "-f", file, context])

    def tag(self, source: str, target: str) -> subprocess.CompletedProcess[str]:
        return self.docker(["tag", source, target])

    def push(self, image: str) -> subprocess.CompletedProcess[str]:
        return self.docker(["push", image])

    def pull(self, image: str) -> subprocess.CompletedProcess[str]:
        return self.docker(["pull", image])

    def login(self, server: str, username: str, password: str) -> subprocess.CompletedProcess[str]:
        # password on stdin, never on the command line
        return self.docker(["login", server, "--username", username, "--password-stdin"], input_text=password)
