"""CI deploy key: decrypt the encrypted deploy key and register it with ssh-agent.

The CI service exposes the AES key and IV as ``encrypted_<label>_key`` and
``encrypted_<label>_iv`` environment variables, where ``<label>`` comes
from ``ENCRYPTION_LABEL``.  The key is installed once, before any build or
push, and is never touched again during the run.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from docmeta.core.errors import CredentialError, StepTimeoutError
from docmeta.core.process import CommandRunner, run_command

logger = logging.getLogger(__name__)

LABEL_VARIABLE = "ENCRYPTION_LABEL"


class DeployKeyInstaller:
    """Decrypts ``encrypted_key_path`` to ``key_path`` and runs ``ssh-add``.

    Parameters
    ----------
    encrypted_key_path:
        The committed, AES-256-CBC encrypted private key.
    key_path:
        Where the decrypted key is written (mode 0600).
    environ:
        Environment to read the label, key and IV from; defaults to
        ``os.environ``.
    timeout:
        Time bound for each external command.
    """

    def __init__(
        self,
        encrypted_key_path: Path = Path("deploy_key.enc"),
        key_path: Path = Path("deploy_key"),
        *,
        environ: Mapping[str, str] | None = None,
        timeout: float | None = 60.0,
        runner: CommandRunner | None = None,
    ) -> None:
        self.encrypted_key_path = encrypted_key_path
        self.key_path = key_path
        self._environ = environ if environ is not None else os.environ
        self.timeout = timeout
        self._run = runner or run_command

    def cipher_parameters(self) -> tuple[str, str]:
        """Return the (key, iv) hex strings for the configured label."""
        label = self._environ.get(LABEL_VARIABLE)
        if not label:
            raise CredentialError(f"{LABEL_VARIABLE} is not set")
        names = (f"encrypted_{label}_key", f"encrypted_{label}_iv")
        missing = [n for n in names if not self._environ.get(n)]
        if missing:
            raise CredentialError(f"Missing environment variable(s): {', '.join(missing)}")
        return self._environ[names[0]], self._environ[names[1]]

    async def install(self) -> Path:
        """Decrypt the deploy key and add it to the running ssh-agent."""
        key, iv = self.cipher_parameters()
        if not self.encrypted_key_path.is_file():
            raise CredentialError(f"Encrypted key {self.encrypted_key_path} not found")

        await self._check(
            [
                "openssl", "aes-256-cbc",
                "-K", key,
                "-iv", iv,
                "-in", str(self.encrypted_key_path),
                "-out", str(self.key_path),
                "-d",
            ],
            "decrypt",
        )
        try:
            os.chmod(self.key_path, 0o600)
        except OSError as exc:
            raise CredentialError(f"Cannot restrict {self.key_path}: {exc}") from exc
        await self._check(["ssh-add", str(self.key_path)], "ssh-add")
        logger.info("Deploy key %s registered with ssh-agent", self.key_path)
        return self.key_path

    async def _check(self, args: list[str], step: str) -> None:
        try:
            result = await self._run(args, timeout=self.timeout, step=step)
        except StepTimeoutError as exc:
            raise CredentialError(str(exc)) from exc
        if not result.ok:
            # The command line carries the key; report only the tool's output.
            raise CredentialError(
                f"{args[0]} exited with {result.returncode}: {result.tail(5)}"
            )
