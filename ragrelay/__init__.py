"""R2R Chat Relay - a thin HTTP relay and chat UI in front of an R2R backend.

Combines FastAPI for the relay routes, the R2R client library for document,
retrieval and conversation operations, NiceGUI for the chat interface,
and Pydantic for request validation and configuration.

Components:
    - api: HTTP relay routes and error envelope
    - gateway: adapter over the R2R async client
    - storage: local upload staging and document-to-file bookkeeping
    - ui: Web interface for chat, documents and conversations
    - models: Request/response schemas
"""

__version__ = "0.1.0"
