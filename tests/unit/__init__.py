"""Unit tests for individual components in isolation.

Coverage:
    - gateway: Ingest protocol, delete outcomes, pagination, error translation
    - storage: Upload validation, staging and bookkeeping
    - config: Environment loading and validation
    - ui: Chat session state and reply handling

Backend calls go to the fake R2R client from tests/fake_r2r.py.
"""
