"""GPG signing via the external gpg tool.

Each GpgSigner owns a private, ephemeral GNUPGHOME directory. The private
key is imported into it, marked as ultimately trusted and then used for
detached armored signatures. The key passphrase only ever travels through
gpg's stdin (--passphrase-fd 0).

The workspace is deleted on close(), which the context manager guarantees
on every exit path:

    with GpgSigner(certificate) as signer:
        signer.load_signing_certificate()
        signer.sign(path)
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from portal_publisher.config import GpgCertificate
from portal_publisher.signing.cmd_runner import CmdInput, CmdResult, CommandRunner, run_cmd

logger = logging.getLogger(__name__)

# The gpg command timeout in seconds
GPG_DEFAULT_TIMEOUT_SECONDS = 5

# Record prefix of the fingerprint line in `gpg --with-colons` output.
# See https://github.com/gpg/gnupg/blob/master/doc/DETAILS
FINGERPRINT_RECORD = "fpr:"

SIGNATURE_SUFFIX = ".asc"


class SigningError(Exception):
    """Raised when the signing workspace or a signature cannot be produced."""


def extract_fingerprint(colon_output: str) -> str:
    """Return the first fingerprint from `gpg -K --with-colons` output."""
    for line in colon_output.splitlines():
        if line.startswith(FINGERPRINT_RECORD):
            return line[len(FINGERPRINT_RECORD):].replace(":", "")
    raise SigningError("No fingerprint found in gpg key listing")


class GpgSigner:
    """Signs files with a private certificate in an isolated GNUPGHOME."""

    def __init__(self, certificate: GpgCertificate, runner: CommandRunner = run_cmd):
        self._certificate = certificate
        self._runner = runner
        self._fingerprint: Optional[str] = None
        try:
            # mkdtemp creates the directory readable/writable by the owner only
            self.gnupg_home = Path(tempfile.mkdtemp(prefix="_gnupghome-"))
        except OSError as exc:
            raise SigningError("Failed to create GNUPGHOME directory") from exc
        self._env = {"GNUPGHOME": str(self.gnupg_home.resolve())}

    def __enter__(self) -> "GpgSigner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"GpgSigner(gnupg_home={self.gnupg_home}, fingerprint={self._fingerprint})"

    @property
    def fingerprint(self) -> Optional[str]:
        return self._fingerprint

    def close(self) -> None:
        """Delete the GNUPGHOME workspace, including any key material."""
        if self.gnupg_home.exists():
            shutil.rmtree(self.gnupg_home)
            logger.debug("Removed GNUPGHOME %s", self.gnupg_home)

    def load_signing_certificate(self) -> str:
        """Import the certificate, mark it ultimately trusted and return its fingerprint."""
        try:
            key_file = self.gnupg_home / "private.txt"
            key_file.write_text(self._certificate.key, encoding="utf-8")
            self._run(["gpg", "--import", "--batch", str(key_file.resolve())])
            key_file.unlink()

            listing = self._run(["gpg", "-K", "--with-colons"])
            fingerprint = extract_fingerprint(listing.output)

            owner_trust_file = self.gnupg_home / "otrust.txt"
            owner_trust_file.write_text(f"{fingerprint}:6:\n", encoding="utf-8")
            self._run(["gpg", "--import-ownertrust", str(owner_trust_file.resolve())])
        except OSError as exc:
            raise SigningError("Failed to load private GPG key") from exc

        self._fingerprint = fingerprint
        logger.info("Loaded signing certificate %s", fingerprint)
        return fingerprint

    def sign(self, file: Path) -> Path:
        """Create a detached armored signature next to file and return its path."""
        if self._fingerprint is None:
            raise SigningError("Need to load certificate before signing!")

        signature_file = file.parent / (file.name + SIGNATURE_SUFFIX)
        if signature_file.exists():
            raise SigningError(f"Signature already exists for {file}")

        logger.debug("signing %s", file)

        cmd = ["gpg"]
        if logger.isEnabledFor(logging.DEBUG):
            cmd.append("-v")
        cmd += [
            "--batch",
            "--no-tty",
            "--yes",
            "--pinentry-mode",
            "loopback",
            "--passphrase-fd",
            "0",
            "-u",
            self._fingerprint,
            "--detach-sign",
            "--armor",
            str(file.resolve()),
        ]
        self._run(cmd, stdin=self._certificate.secret)

        if not signature_file.exists():
            raise SigningError(f"Created signature not found: {signature_file}")
        return signature_file

    def _run(self, command: list[str], stdin: Optional[str] = None) -> CmdResult:
        return self._runner(
            CmdInput(
                command=command,
                exec_dir=self.gnupg_home,
                stdin=stdin,
                env=self._env,
                timeout=GPG_DEFAULT_TIMEOUT_SECONDS,
            )
        )
