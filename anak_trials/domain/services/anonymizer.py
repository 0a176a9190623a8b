"""Anonymizer for export-facing clinical trial data.

Replaces the child identifier (nisn) of a trial row with a one-way token.

Two policies are available:

- ``salted``: PBKDF2-HMAC-SHA256 with a fresh random salt per call and a
  fixed work factor. The same nisn yields a different token on every call;
  a token still verifies against its input because the salt travels inside
  the token (``<digest>$<cost>$<salt>``, URL-safe base64 without padding).
- ``keyed``: HMAC-SHA256 with a configured secret. Deterministic, so tokens
  can be joined or deduplicated downstream.

Security Impact:
    - The raw nisn is removed from every output record (replace, not augment)
    - Raw identifiers and secrets are never logged
    - Salted tokens cannot be linked across exports without the input
"""

import base64
import hashlib
import hmac
import logging
import os
from typing import Any, Optional

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from anak_trials.domain.models import AnonymizedTrialRecord
from anak_trials.domain.ports import AnonymizationError

logger = logging.getLogger(__name__)

IDENTIFIER_FIELD = "nisn"
TOKEN_FIELD = "hashed_nisn"

SALTED = "salted"
KEYED = "keyed"
SUPPORTED_MODES = (SALTED, KEYED)

DEFAULT_COST = 8
SALT_BYTES = 16
DIGEST_BYTES = 32
MIN_COST = 4
MAX_COST = 31


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _kdf(salt: bytes, cost: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=DIGEST_BYTES,
        salt=salt,
        iterations=2 ** cost,
    )


class Anonymizer:
    """Derives opaque tokens from child identifiers.

    Parameters:
        mode: ``salted`` (default) or ``keyed``
        cost: Work factor for the salted policy (iterations are ``2 ** cost``)
        secret: HMAC secret, required by the keyed policy

    Raises:
        AnonymizationError: If the mode is unknown, the cost is out of range
            or the keyed policy has no secret
    """

    def __init__(self, mode: str = SALTED, cost: int = DEFAULT_COST, secret: Optional[str] = None):
        mode = mode.lower()
        if mode not in SUPPORTED_MODES:
            raise AnonymizationError(f"Unsupported anonymization mode: {mode}. Supported: {list(SUPPORTED_MODES)}")
        if not MIN_COST <= cost <= MAX_COST:
            raise AnonymizationError(f"Work factor must be between {MIN_COST} and {MAX_COST}, got {cost}")
        if mode == KEYED and not secret:
            raise AnonymizationError("Keyed anonymization requires a secret")

        self.mode = mode
        self.cost = cost
        self._secret = secret.encode("utf-8") if secret else None
        logger.debug(f"Anonymizer initialized with mode={self.mode}, cost={self.cost}")

    @property
    def deterministic(self) -> bool:
        return self.mode == KEYED

    def hash_identifier(self, value: Any) -> str:
        """Return a token for ``str(value)``.

        Parameters:
            value: The identifier; coerced to its canonical text form

        Returns:
            str: Opaque token safe for external sharing
        """
        if value is None:
            raise AnonymizationError("Cannot anonymize a missing identifier")

        text = str(value).encode("utf-8")

        if self.mode == KEYED:
            return hmac.new(self._secret, text, hashlib.sha256).hexdigest()

        salt = os.urandom(SALT_BYTES)
        digest = _kdf(salt, self.cost).derive(text)
        return f"{_b64encode(digest)}${self.cost:02d}${_b64encode(salt)}"

    def verify(self, value: Any, token: str) -> bool:
        """Check that a full-length token was derived from ``value``."""
        text = str(value).encode("utf-8")

        if self.mode == KEYED:
            expected = hmac.new(self._secret, text, hashlib.sha256).hexdigest()
            return hmac.compare_digest(expected, token)

        try:
            digest_part, cost_part, salt_part = token.split("$")
            digest = _b64decode(digest_part)
            salt = _b64decode(salt_part)
            cost = int(cost_part)
        except ValueError:
            return False
        if not MIN_COST <= cost <= MAX_COST:
            return False

        try:
            _kdf(salt, cost).verify(text, digest)
        except InvalidKey:
            return False
        return True

    def anonymize_record(self, row: dict[str, Any], prefix_length: Optional[int] = None) -> dict[str, Any]:
        """Replace the nisn of a trial row with its token.

        Parameters:
            row: Clinical trial row
            prefix_length: Keep only the first N characters of the token
                (tokens shorter than N keep their natural length)

        Returns:
            dict: The row without ``nisn`` and with ``hashed_nisn``

        Raises:
            AnonymizationError: If the row has no nisn or the prefix length
                is below 1
        """
        if IDENTIFIER_FIELD not in row:
            raise AnonymizationError(f"Row has no {IDENTIFIER_FIELD} field")
        if prefix_length is not None and prefix_length < 1:
            raise AnonymizationError(f"Prefix length must be at least 1, got {prefix_length}")

        rest = {key: value for key, value in row.items() if key != IDENTIFIER_FIELD}
        token = self.hash_identifier(row[IDENTIFIER_FIELD])
        if prefix_length is not None:
            token = token[:prefix_length]

        record = AnonymizedTrialRecord.model_validate({**rest, TOKEN_FIELD: token})
        return record.model_dump()

    def anonymize_records(self, rows: list[dict[str, Any]], prefix_length: Optional[int] = None) -> list[dict[str, Any]]:
        return [self.anonymize_record(row, prefix_length=prefix_length) for row in rows]
