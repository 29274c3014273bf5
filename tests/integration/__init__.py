"""Integration tests for the relay as a whole.

Requests go through the real FastAPI app (routing, validation, error
envelopes, CORS) with the fake R2R client behind the gateway and a
temporary upload directory.
"""
