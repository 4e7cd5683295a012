"""
SIGN_MODE_DIRECT signing and verification.

The signature is ECDSA/secp256k1 over SHA256(SignDoc), with an RFC 6979
deterministic nonce (libsecp256k1 via coincurve), low-S normalised, and
serialised as 64 bytes r || s.
"""

from __future__ import annotations

from coincurve import PrivateKey
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)
from loguru import logger

from cosmos_transfer.errors import SigningError
from cosmos_transfer.models import SignedTransaction, UnsignedTransaction
from cosmos_transfer.tx import proto
from cosmos_transfer.tx.builder import encode_auth_info, encode_body
from cosmos_transfer.wallet.bip32 import SECP256K1_N
from cosmos_transfer.wallet.keys import KeyPair

SIGNATURE_LENGTH = 64


def sign_doc_bytes(tx: UnsignedTransaction, public_key: bytes) -> bytes:
    """Canonical SignDoc for ``tx`` as signed by ``public_key``."""
    return proto.encode_sign_doc(
        encode_body(tx), encode_auth_info(tx, public_key), tx.chain_id, tx.account_number
    )


def sign_bytes(message: bytes, private_key: bytes | bytearray) -> bytes:
    """
    Sign ``message`` (hashed with SHA256) and return the 64-byte compact signature.

    Raises:
        SigningError: If the crypto library fails
    """
    try:
        der = PrivateKey(bytes(private_key)).sign(message)
        r, s = decode_dss_signature(der)
    except Exception as e:
        raise SigningError(f"ECDSA signing failed: {e}") from e

    # libsecp256k1 already emits low-S; enforced again since the chain rejects high-S
    if s > SECP256K1_N // 2:
        s = SECP256K1_N - s
    return r.to_bytes(32, "big") + s.to_bytes(32, "big")


def verify_bytes(signature: bytes, message: bytes, public_key: bytes) -> bool:
    """Check a 64-byte compact low-S signature over SHA256(message)."""
    if len(signature) != SIGNATURE_LENGTH:
        return False
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:], "big")
    if not (0 < r < SECP256K1_N and 0 < s <= SECP256K1_N // 2):
        return False

    try:
        key = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), public_key)
        key.verify(encode_dss_signature(r, s), message, ec.ECDSA(hashes.SHA256()))
        return True
    except (InvalidSignature, ValueError):
        return False


def sign(tx: UnsignedTransaction, key: KeyPair) -> SignedTransaction:
    """
    Sign an unsigned transfer.

    Args:
        tx: Transaction to sign
        key: Sender key pair (its address must be ``tx.sender``)

    Returns:
        SignedTransaction carrying the exact signed body/auth info bytes

    Raises:
        SigningError: On cryptographic failure, sender/key mismatch or a wiped key
    """
    if key.is_wiped:
        raise SigningError("Signing key has already been wiped")

    body_bytes = encode_body(tx)
    auth_info_bytes = encode_auth_info(tx, key.public_key)
    doc = proto.encode_sign_doc(body_bytes, auth_info_bytes, tx.chain_id, tx.account_number)

    prefix = tx.sender.rsplit("1", 1)[0]
    if key.address(prefix) != tx.sender:
        raise SigningError(f"Signing key does not control sender address {tx.sender}")

    signature = sign_bytes(doc, key.private_key)
    logger.debug(f"Signed sign doc ({len(doc)} bytes) with {key.public_key_hex}")

    return SignedTransaction(
        tx=tx,
        body_bytes=body_bytes,
        auth_info_bytes=auth_info_bytes,
        signature=signature,
        public_key=key.public_key,
    )


def verify_signature(signature: bytes, tx: UnsignedTransaction, public_key: bytes) -> bool:
    """True if ``signature`` is valid for exactly this transaction and key."""
    return verify_bytes(signature, sign_doc_bytes(tx, public_key), public_key)


def verify(signed: SignedTransaction) -> bool:
    """
    Verify a SignedTransaction end to end.

    Checks that the carried bytes still encode the carried transaction and that
    the signature covers them.
    """
    if signed.body_bytes != encode_body(signed.tx):
        return False
    if signed.auth_info_bytes != encode_auth_info(signed.tx, signed.public_key):
        return False
    return verify_signature(signed.signature, signed.tx, signed.public_key)
