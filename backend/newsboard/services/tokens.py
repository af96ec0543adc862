"""
Vote tokens.

A vote link carries its own authorization: ``"<entry_id>:<user_id>"`` sealed
with an XSalsa20-Poly1305 SecretBox and hex-encoded for the ``tok`` query
parameter. The server needs no session state to check it, and a token cannot
be re-pointed at another entry or voter without the passphrase.
"""

from __future__ import annotations

import binascii
import re
from dataclasses import dataclass
from functools import lru_cache

from nacl.encoding import RawEncoder
from nacl.exceptions import CryptoError
from nacl.hash import sha256
from nacl.secret import SecretBox
from nacl.utils import random as nacl_random

from newsboard.core.settings import settings

_CLAIM_RE = re.compile(r"(\d+):(\d+)", re.ASCII)


@dataclass(frozen=True)
class VoteClaim:
    entry_id: int
    user_id: int


def derive_key(passphrase: str) -> bytes:
    return sha256(passphrase.encode("utf-8"), encoder=RawEncoder)


class VoteTokenCodec:
    def __init__(self, passphrase: str) -> None:
        if not passphrase:
            raise ValueError("vote token passphrase must not be empty")
        self.box = SecretBox(derive_key(passphrase))

    def encode(self, entry_id: int, user_id: int) -> str:
        if entry_id < 0 or user_id < 0:
            raise ValueError("entry_id and user_id must be non-negative")
        # fresh nonce per token; SecretBox prepends it to the ciphertext
        nonce = nacl_random(SecretBox.NONCE_SIZE)
        sealed = self.box.encrypt(f"{entry_id}:{user_id}".encode("ascii"), nonce)
        return bytes(sealed).hex()

    def decode(self, token: str) -> VoteClaim | None:
        """Return the sealed claim, or None for anything that fails to open or parse."""
        try:
            raw = binascii.unhexlify(token)
        except (TypeError, ValueError, binascii.Error):
            return None
        if len(raw) < SecretBox.NONCE_SIZE + SecretBox.MACBYTES:
            return None
        try:
            plaintext = self.box.decrypt(raw).decode("ascii")
        except (CryptoError, UnicodeDecodeError):
            return None
        m = _CLAIM_RE.fullmatch(plaintext)
        if not m:
            return None
        return VoteClaim(entry_id=int(m.group(1)), user_id=int(m.group(2)))


@lru_cache(maxsize=1)
def get_vote_codec() -> VoteTokenCodec:
    return VoteTokenCodec(settings.vote_token_passphrase)
