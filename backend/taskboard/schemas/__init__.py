"""Pydantic entities, request bodies and response envelopes."""
