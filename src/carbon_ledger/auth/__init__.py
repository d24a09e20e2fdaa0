"""Caller identity: bearer token issuance and verification."""
