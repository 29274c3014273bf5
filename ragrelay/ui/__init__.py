"""NiceGUI interface - thin visualization layer over the relay routes.

Responsibilities:
    - Message thread with optimistic display of the user's message
    - Conversation list with create, select and delete
    - Document upload, listing and deletion

Contains no business logic. Delegates all operations to the relay API.
"""
