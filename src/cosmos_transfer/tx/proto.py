"""
Canonical protobuf encoding of the Cosmos SDK transaction messages.

Only the handful of messages a bank send needs are encoded, by hand, in
proto3 canonical form: ascending field numbers, default scalars omitted,
repeated elements always emitted.

Messages (cosmos-sdk proto definitions):
- cosmos.base.v1beta1.Coin        1 denom, 2 amount (decimal string)
- cosmos.bank.v1beta1.MsgSend     1 from_address, 2 to_address, 3 repeated Coin
- google.protobuf.Any             1 type_url, 2 value
- cosmos.tx.v1beta1.TxBody        1 repeated Any messages, 2 memo, 3 timeout_height
- cosmos.tx.v1beta1.ModeInfo      1 single { 1 mode }
- cosmos.tx.v1beta1.SignerInfo    1 public_key Any, 2 mode_info, 3 sequence
- cosmos.tx.v1beta1.Fee           1 repeated Coin amount, 2 gas_limit
- cosmos.tx.v1beta1.AuthInfo      1 repeated SignerInfo, 2 fee
- cosmos.tx.v1beta1.SignDoc       1 body_bytes, 2 auth_info_bytes, 3 chain_id, 4 account_number
- cosmos.tx.v1beta1.TxRaw         1 body_bytes, 2 auth_info_bytes, 3 repeated signatures
"""

from __future__ import annotations

from collections.abc import Iterable

MSG_SEND_TYPE_URL = "/cosmos.bank.v1beta1.MsgSend"
SECP256K1_PUBKEY_TYPE_URL = "/cosmos.crypto.secp256k1.PubKey"

SIGN_MODE_DIRECT = 1

WIRE_VARINT = 0
WIRE_LENGTH_DELIMITED = 2


# =============================================================================
# Wire primitives
# =============================================================================


def encode_uvarint(n: int) -> bytes:
    """
    Encode a non-negative integer as a protobuf base-128 varint.

    Args:
        n: Integer to encode (0 <= n < 2**64)

    Returns:
        Encoded bytes
    """
    if n < 0 or n >= 1 << 64:
        raise ValueError(f"uvarint out of range: {n}")
    out = bytearray()
    while True:
        byte = n & 0x7F
        n >>= 7
        if n:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_uvarint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """
    Decode a protobuf varint.

    Returns:
        (value, new_offset) tuple
    """
    result = 0
    shift = 0
    while True:
        if offset >= len(data):
            raise ValueError("Truncated varint")
        byte = data[offset]
        offset += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, offset
        shift += 7
        if shift >= 64:
            raise ValueError("Varint too long")


def field_key(field_number: int, wire_type: int) -> bytes:
    return encode_uvarint((field_number << 3) | wire_type)


def field_varint(field_number: int, value: int) -> bytes:
    """Scalar varint field; omitted when zero (proto3 default)."""
    if value == 0:
        return b""
    return field_key(field_number, WIRE_VARINT) + encode_uvarint(value)


def field_bytes(field_number: int, value: bytes, *, omit_empty: bool = True) -> bytes:
    """Length-delimited field (bytes, string or embedded message)."""
    if not value and omit_empty:
        return b""
    return field_key(field_number, WIRE_LENGTH_DELIMITED) + encode_uvarint(len(value)) + value


def field_string(field_number: int, value: str) -> bytes:
    return field_bytes(field_number, value.encode("utf-8"))


def field_message(field_number: int, value: bytes) -> bytes:
    """Embedded message field; a set sub-message is emitted even when empty."""
    return field_bytes(field_number, value, omit_empty=False)


def repeated_message(field_number: int, values: Iterable[bytes]) -> bytes:
    return b"".join(field_message(field_number, v) for v in values)


def parse_fields(data: bytes) -> list[tuple[int, int, int | bytes]]:
    """
    Split an encoded message into (field_number, wire_type, value) triples.

    Only varint and length-delimited wire types are supported, which covers
    every message in this module.
    """
    fields: list[tuple[int, int, int | bytes]] = []
    offset = 0
    while offset < len(data):
        key, offset = decode_uvarint(data, offset)
        field_number, wire_type = key >> 3, key & 0x07
        if wire_type == WIRE_VARINT:
            value, offset = decode_uvarint(data, offset)
            fields.append((field_number, wire_type, value))
        elif wire_type == WIRE_LENGTH_DELIMITED:
            length, offset = decode_uvarint(data, offset)
            if offset + length > len(data):
                raise ValueError("Truncated length-delimited field")
            fields.append((field_number, wire_type, data[offset : offset + length]))
            offset += length
        else:
            raise ValueError(f"Unsupported wire type {wire_type}")
    return fields


# =============================================================================
# Messages
# =============================================================================


def encode_coin(denom: str, amount: int) -> bytes:
    return field_string(1, denom) + field_string(2, str(amount))


def encode_any(type_url: str, value: bytes) -> bytes:
    return field_string(1, type_url) + field_bytes(2, value)


def encode_msg_send(from_address: str, to_address: str, coins: Iterable[tuple[str, int]]) -> bytes:
    return (
        field_string(1, from_address)
        + field_string(2, to_address)
        + repeated_message(3, (encode_coin(denom, amount) for denom, amount in coins))
    )


def encode_tx_body(messages: Iterable[bytes], memo: str = "", timeout_height: int = 0) -> bytes:
    """
    Args:
        messages: Already encoded ``Any`` messages
        memo: Free-form note
        timeout_height: Block height after which the tx is invalid (0 = none)
    """
    return repeated_message(1, messages) + field_string(2, memo) + field_varint(3, timeout_height)


def encode_secp256k1_pubkey(public_key: bytes) -> bytes:
    return encode_any(SECP256K1_PUBKEY_TYPE_URL, field_bytes(1, public_key))


def encode_mode_info_single(mode: int = SIGN_MODE_DIRECT) -> bytes:
    return field_message(1, field_varint(1, mode))


def encode_signer_info(public_key: bytes, sequence: int, mode: int = SIGN_MODE_DIRECT) -> bytes:
    return (
        field_message(1, encode_secp256k1_pubkey(public_key))
        + field_message(2, encode_mode_info_single(mode))
        + field_varint(3, sequence)
    )


def encode_fee(coins: Iterable[tuple[str, int]], gas_limit: int) -> bytes:
    return repeated_message(
        1, (encode_coin(denom, amount) for denom, amount in coins)
    ) + field_varint(2, gas_limit)


def encode_auth_info(signer_infos: Iterable[bytes], fee: bytes) -> bytes:
    return repeated_message(1, signer_infos) + field_message(2, fee)


def encode_sign_doc(
    body_bytes: bytes, auth_info_bytes: bytes, chain_id: str, account_number: int
) -> bytes:
    return (
        field_bytes(1, body_bytes)
        + field_bytes(2, auth_info_bytes)
        + field_string(3, chain_id)
        + field_varint(4, account_number)
    )


def encode_tx_raw(body_bytes: bytes, auth_info_bytes: bytes, signatures: Iterable[bytes]) -> bytes:
    return (
        field_bytes(1, body_bytes)
        + field_bytes(2, auth_info_bytes)
        + b"".join(field_bytes(3, sig, omit_empty=False) for sig in signatures)
    )
