"""External command execution for the signer.

Commands run without a shell, with stderr merged into stdout, a hard
timeout and resource limits. Optional stdin text is the only channel for
secrets: it never shows up in argv, the environment or on disk.

Any failure (non-zero exit, timeout, OS error) raises CommandError.
"""

import logging
import os
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from portal_publisher.signing.limits import apply_resource_limits

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Raised when an external command fails, times out or cannot start."""


@dataclass(frozen=True)
class CmdInput:
    """Input for a command execution.

    exec_dir defaults to the system temp directory. stdin is never logged.
    """

    command: list[str]
    exec_dir: Optional[Path] = None
    stdin: Optional[str] = None
    env: Optional[dict[str, str]] = None
    timeout: int = 5

    def __repr__(self) -> str:
        return (
            f"CmdInput(command={self.command!r}, exec_dir={self.exec_dir!r}, "
            f"stdin={'***' if self.stdin is not None else None}, env={self.env!r}, "
            f"timeout={self.timeout})"
        )


@dataclass(frozen=True)
class CmdResult:
    status: int
    output: str


CommandRunner = Callable[[CmdInput], CmdResult]


def run_cmd(cmd_input: CmdInput) -> CmdResult:
    """Run an external command and return its exit status and combined output."""
    exec_dir = cmd_input.exec_dir or Path(tempfile.gettempdir())
    env = None
    if cmd_input.env is not None:
        env = {**os.environ, **cmd_input.env}

    logger.debug("Run in %s command: %s", exec_dir, cmd_input.command)

    try:
        result = subprocess.run(
            cmd_input.command,
            cwd=str(exec_dir),
            input=cmd_input.stdin,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=cmd_input.timeout,
            env=env,
            preexec_fn=apply_resource_limits,
        )
    except subprocess.TimeoutExpired as exc:
        raise CommandError(
            f"Command timed out after {cmd_input.timeout} seconds: {cmd_input.command[0]}"
        ) from exc
    except OSError as exc:
        raise CommandError(f"Failed running command {cmd_input.command[0]}: {exc}") from exc

    output = (result.stdout or "").rstrip("\n")
    logger.debug("status: %d, output: %s", result.returncode, output)

    if result.returncode != 0:
        raise CommandError(
            f"Command {cmd_input.command[0]} failed (exit {result.returncode}): {output}"
        )

    return CmdResult(status=result.returncode, output=output)
