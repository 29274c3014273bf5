"""Test package for the R2R chat relay.

Structure:
    - unit/: Gateway, upload handling, config and chat session state
    - integration/: Relay routes over ASGITransport, and the UI's relay client
    - fake_r2r.py: In-memory stand-in for the R2R client

No test needs a running R2R service. Leverages pytest with pytest-check
for soft assertions.
"""
