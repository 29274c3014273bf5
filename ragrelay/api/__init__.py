"""FastAPI relay between the chat UI and the R2R backend.

One POST route per gateway operation, validated request bodies and a
uniform ``{error}`` envelope for failures.

Endpoints:
    - POST /upload, /ingest, /delete, /list: Documents
    - POST /query: Retrieval agent answers
    - POST /conversation/{create,list,message,details,delete}: Conversations
    - GET /health: Service health status
"""
