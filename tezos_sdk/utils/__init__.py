"""Byte, hashing and base58check helpers shared by the SDK."""
