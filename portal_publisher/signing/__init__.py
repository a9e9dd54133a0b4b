"""Signing module: supervises the external gpg tool.

Public API:
    GpgSigner(certificate, runner=run_cmd)
    run_cmd(CmdInput) -> CmdResult
"""

from portal_publisher.signing.cmd_runner import CmdInput, CmdResult, CommandError, run_cmd
from portal_publisher.signing.gpg import GpgSigner, SigningError

__all__ = ["CmdInput", "CmdResult", "CommandError", "GpgSigner", "SigningError", "run_cmd"]
