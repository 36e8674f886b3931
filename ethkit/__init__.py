"""Ethereum contract ABI encoding and decoding, human-readable ABI parsing,
and contract call, event and deployment helpers over a user-supplied client."""

__version__ = "0.1.0"