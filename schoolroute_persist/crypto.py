"""
RESPONSIBILITIES
- Seal whole records into a single-field encrypted envelope for storage at rest.
- Open envelopes back into records, turning every failure into ``None``.
PROCESS OVERVIEW
1. RecordCipher(secret_key) derives a Fernet key from the configured passphrase.
2. encrypt() JSON-serializes the record and returns {"encryptedData": token}.
3. decrypt() validates the envelope shape, decrypts, parses and returns the dict.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from typing import Any, Mapping

from cryptography.fernet import Fernet, InvalidToken

from schoolroute.config import Settings
from schoolroute.core.errors import ConfigError, EnvelopeError

ENVELOPE_FIELD = "encryptedData"

LOGGER = logging.getLogger("schoolroute.persist.crypto")


def derive_key(secret_key: str) -> bytes:
    """Return the urlsafe base64 Fernet key derived from *secret_key*."""

    digest = hashlib.sha256(secret_key.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


class RecordCipher:
    """Symmetric envelope around JSON-serializable records."""

    def __init__(self, secret_key: str) -> None:
        if not secret_key:
            raise ConfigError("Nenhuma chave de criptografia foi definida. Defina ENCRYPTION_SECRET_KEY.")
        self._fernet = Fernet(derive_key(secret_key))

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecordCipher":
        return cls(settings.require_secret_key())

    def encrypt(self, record: Mapping[str, Any]) -> dict[str, str]:
        """Return ``{"encryptedData": token}`` holding the whole *record*."""

        try:
            text = json.dumps(dict(record), ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise EnvelopeError(f"Record is not JSON serializable: {exc}") from exc
        token = self._fernet.encrypt(text.encode("utf-8"))
        return {ENVELOPE_FIELD: token.decode("ascii")}

    def decrypt(self, envelope: Mapping[str, Any] | None) -> dict[str, Any] | None:
        """Return the record sealed in *envelope*, or ``None`` when it is not usable.

        Missing envelope field, a token that fails to decrypt, an empty
        plaintext and a payload that is not a JSON object all yield ``None``.
        """

        if not isinstance(envelope, Mapping):
            return None
        token = envelope.get(ENVELOPE_FIELD)
        if not isinstance(token, str) or not token:
            return None
        try:
            plaintext = self._fernet.decrypt(token.encode("utf-8")).decode("utf-8")
            if not plaintext:
                return None
            payload = json.loads(plaintext)
        except (InvalidToken, ValueError) as exc:
            LOGGER.warning("Failed to decrypt envelope: %s", exc.__class__.__name__)
            return None
        if not isinstance(payload, dict):
            return None
        return payload


__all__ = ["ENVELOPE_FIELD", "RecordCipher", "derive_key"]
