import base64
import binascii
import tempfile
from subprocess import (
    PIPE,
    CalledProcessError,
    run,
)

import requests

KEYBASE_PREFIX = "keybase:"
KEYBASE_PUBLIC_KEY_URL = "https://keybase.io/{username}/pgp_keys.asc"


class GPGKeyError(Exception):
    pass


class GPGEncryptionError(Exception):
    pass


def retrieve_gpg_key(pgp_key: str, timeout: float = 30) -> bytes:
    """Return the public key for ``pgp_key``.

    ``pgp_key`` is either a base64 encoded public key or ``keybase:<username>``.
    """
    if pgp_key.startswith(KEYBASE_PREFIX):
        username = pgp_key.removeprefix(KEYBASE_PREFIX)
        url = KEYBASE_PUBLIC_KEY_URL.format(username=username)
        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise GPGKeyError(
                f"error retrieving public key for keybase user {username}: {e}"
            ) from e
        return response.content

    try:
        return base64.b64decode(pgp_key, validate=True)
    except binascii.Error as e:
        raise GPGKeyError(f"error decoding public key: {e}") from e


def _fingerprint(gnupg_home_dir: str) -> str:
    proc = run(
        ["gpg", "--homedir", gnupg_home_dir, "--with-colons", "--fingerprint"],
        stdout=PIPE,
        stderr=PIPE,
        check=True,
    )
    for line in proc.stdout.decode("utf-8").splitlines():
        fields = line.split(":")
        if fields[0] == "fpr":
            return fields[9]
    raise GPGKeyError("No fingerprint found for imported public key")


def gpg_encrypt(content: str, public_gpg_key: bytes) -> tuple[str, str]:
    """Encrypt ``content`` and return the key fingerprint and base64 ciphertext."""
    with tempfile.TemporaryDirectory() as gnupg_home_dir:
        try:
            run(
                ["gpg", "--homedir", gnupg_home_dir, "--import"],
                stdout=PIPE,
                stderr=PIPE,
                input=public_gpg_key,
                check=True,
            )
            fingerprint = _fingerprint(gnupg_home_dir)
            proc = run(
                [
                    "gpg",
                    "--homedir",
                    gnupg_home_dir,
                    "--trust-model",
                    "always",
                    "--encrypt",
                    "-r",
                    fingerprint,
                ],
                input=content.encode(),
                stdout=PIPE,
                stderr=PIPE,
                check=True,
            )
        except CalledProcessError as e:
            raise GPGEncryptionError(
                f"gpg failed: {e.stderr.decode('utf-8', errors='replace')}"
            ) from e
    return fingerprint, base64.b64encode(proc.stdout).decode("utf-8")
