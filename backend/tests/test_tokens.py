"""Tests for sealed vote tokens."""

import pytest
from nacl.secret import SecretBox

from newsboard.services.tokens import VoteClaim, VoteTokenCodec, derive_key


@pytest.fixture
def codec():
    return VoteTokenCodec("unit-test-passphrase")


def test_round_trip(codec):
    for entry_id, user_id in [(0, 0), (1, 2), (123, 12), (2**40, 987654321)]:
        assert codec.decode(codec.encode(entry_id, user_id)) == VoteClaim(entry_id, user_id)


def test_fresh_nonce_every_time(codec):
    a = codec.encode(5, 9)
    b = codec.encode(5, 9)
    assert a != b
    assert a[: SecretBox.NONCE_SIZE * 2] != b[: SecretBox.NONCE_SIZE * 2]
    assert codec.decode(a) == codec.decode(b) == VoteClaim(5, 9)


def test_token_is_lowercase_hex(codec):
    tok = codec.encode(1, 1)
    assert all(c in "0123456789abcdef" for c in tok)


def test_flipped_bit_fails_authentication(codec):
    raw = bytearray.fromhex(codec.encode(42, 7))
    for i in range(SecretBox.NONCE_SIZE, len(raw)):
        tampered = bytearray(raw)
        tampered[i] ^= 0x01
        assert codec.decode(tampered.hex()) is None


def test_flipped_nonce_bit_fails(codec):
    raw = bytearray.fromhex(codec.encode(42, 7))
    raw[0] ^= 0x80
    assert codec.decode(raw.hex()) is None


@pytest.mark.parametrize("tok", ["", "zz", "not hex at all", "abc", "00" * 10, "00" * 39])
def test_garbage_is_invalid_not_an_error(codec, tok):
    assert codec.decode(tok) is None


def test_truncated_token(codec):
    tok = codec.encode(42, 7)
    assert codec.decode(tok[:-2]) is None
    assert codec.decode(tok[: SecretBox.NONCE_SIZE * 2]) is None


def test_other_passphrase_cannot_open(codec):
    other = VoteTokenCodec("rotated-passphrase")
    assert other.decode(codec.encode(3, 4)) is None


@pytest.mark.parametrize("plaintext", [b"12", b"12:", b":3", b"1:2:3", b"-1:2", b"a:b", b"1:2\n", b" 1:2"])
def test_authentic_but_malformed_claim_is_invalid(codec, plaintext):
    box = SecretBox(derive_key("unit-test-passphrase"))
    tok = bytes(box.encrypt(plaintext)).hex()
    assert codec.decode(tok) is None


def test_rejects_negative_ids(codec):
    with pytest.raises(ValueError):
        codec.encode(-1, 3)
    with pytest.raises(ValueError):
        codec.encode(3, -1)


def test_rejects_empty_passphrase():
    with pytest.raises(ValueError):
        VoteTokenCodec("")


def test_spaced_hex_is_rejected(codec):
    tok = codec.encode(3, 4)
    spaced = " ".join(tok[i:i + 2] for i in range(0, len(tok), 2))
    assert codec.decode(spaced) is None
    assert codec.decode(tok + "\n") is None
    assert codec.decode(tok) == VoteClaim(3, 4)
