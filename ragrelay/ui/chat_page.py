"""NiceGUI chat interface: conversations, documents and the message thread."""

import os
import uuid
from datetime import datetime
from typing import Any

from nicegui import events, ui

from ragrelay.ui.relay_client import RelayClient, RelayError

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

WELCOME_MESSAGE = (
    "Hello! I'm your R2R AI assistant. You can create a new conversation, "
    "upload documents, and ask questions about them. How can I help you today?"
)
ERROR_REPLY = (
    "Sorry, I encountered an error while processing your message. "
    "Please make sure the R2R backend is running."
)

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }
    body { background: #f9fafb; }
    .sidebar { background: white; border-right: 1px solid #e5e7eb; }
    .message-user {
        background: #2563eb;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }
    .message-assistant {
        background: white;
        color: #1f2937;
        border: 1px solid #e5e7eb;
        border-radius: 18px 18px 18px 4px;
    }
    .conversation-active { background: #eff6ff; border: 1px solid #bfdbfe; }
    .message-assistant pre { margin: 0.5rem 0; }
</style>
"""


class ChatSession:
    """Chat state for one browser page.

    Messages live only as long as the page; the backend owns the
    persisted conversation history.
    """

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []
        self.documents: list[dict[str, Any]] = []
        self.conversation_id: str | None = None
        self.is_waiting: bool = False

    def add_message(self, role: str, content: str) -> dict[str, Any]:
        message = {
            "id": uuid.uuid4().hex,
            "content": content,
            "role": role,
            "timestamp": datetime.now(),
        }
        self.messages.append(message)
        return message

    def switch_conversation(self, conversation_id: str | None) -> None:
        self.conversation_id = conversation_id
        self.messages.clear()
        if conversation_id is None:
            self.add_message("assistant", WELCOME_MESSAGE)

    def load_history(self, history: list[dict[str, str]]) -> None:
        """Replace the thread with a conversation's stored messages."""
        self.messages.clear()
        for entry in history:
            self.add_message(entry["role"], entry["content"])

    def add_document(self, document: dict[str, Any]) -> None:
        self.documents.append(document)
        self.add_message(
            "assistant",
            f'Document "{document["name"]}" has been uploaded successfully. '
            "You can now ask questions about it.",
        )

    def remove_document(self, document_id: str) -> None:
        self.documents = [doc for doc in self.documents if doc["id"] != document_id]


async def request_reply(relay: RelayClient, session: ChatSession, text: str) -> dict[str, Any]:
    """Ask the relay to answer a question and append the assistant's reply.

    On any relay failure the fixed error reply is appended instead.

    Returns:
        The appended assistant message.
    """
    session.is_waiting = True
    try:
        answer = await relay.query(text, session.conversation_id)
    except RelayError:
        answer = ERROR_REPLY
    finally:
        session.is_waiting = False
    return session.add_message("assistant", answer)


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    relay = RelayClient(API_BASE_URL)
    session = ChatSession()
    session.switch_conversation(None)

    messages_container: ui.column
    conversations_container: ui.column
    documents_container: ui.column
    input_field: ui.textarea
    send_btn: ui.button

    def render_message(msg: dict[str, Any]) -> None:
        is_user = msg["role"] == "user"
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align}"):
            with ui.column().classes("max-w-[70%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    if is_user:
                        ui.label(msg["content"]).classes("text-sm whitespace-pre-wrap")
                    else:
                        ui.markdown(msg["content"]).classes("text-sm")
                ui.label(msg["timestamp"].strftime("%I:%M %p")).classes(
                    f"text-[10px] text-gray-400 {'self-end' if is_user else 'self-start'}"
                )

    def refresh_messages() -> None:
        messages_container.clear()
        with messages_container:
            for msg in session.messages:
                render_message(msg)
            if session.is_waiting:
                with ui.row().classes("items-center gap-2"):
                    ui.spinner("dots", size="lg", color="primary")
                    ui.label("Thinking...").classes("text-sm text-gray-500 italic")

    async def send_message() -> None:
        text = (input_field.value or "").strip()
        if not text or session.is_waiting:
            return

        input_field.value = ""
        send_btn.disable()
        # Optimistic insert: the user's message shows while the reply is pending.
        session.add_message("user", text)
        session.is_waiting = True
        refresh_messages()
        await request_reply(relay, session, text)
        send_btn.enable()
        refresh_messages()

    async def select_conversation(conversation_id: str | None) -> None:
        session.switch_conversation(conversation_id)
        if conversation_id:
            try:
                session.load_history(await relay.conversation_messages(conversation_id))
            except RelayError as e:
                ui.notify(f"Could not load conversation: {e.message}", type="negative")
        refresh_messages()
        await refresh_conversations()

    async def create_conversation() -> None:
        try:
            conversation = await relay.create_conversation()
        except RelayError as e:
            ui.notify(e.message, type="negative")
            return
        await select_conversation(str(conversation.get("id")))

    async def delete_conversation(conversation_id: str) -> None:
        try:
            await relay.delete_conversation(conversation_id)
        except RelayError as e:
            ui.notify(e.message, type="negative")
            return
        if conversation_id == session.conversation_id:
            await select_conversation(None)
        else:
            await refresh_conversations()

    async def refresh_conversations() -> None:
        try:
            conversations = await relay.list_conversations()
        except RelayError as e:
            conversations = []
            ui.notify(f"Could not list conversations: {e.message}", type="warning")

        conversations_container.clear()
        with conversations_container:
            if not conversations:
                ui.label("No conversations yet. Create one to get started!").classes(
                    "text-sm text-gray-500 text-center py-4"
                )
            for conversation in conversations:
                conversation_id = str(conversation.get("id"))
                active = "conversation-active" if conversation_id == session.conversation_id else ""
                title = conversation.get("name") or f"Conversation {conversation_id[:8]}"
                with ui.row().classes(
                    f"w-full items-center justify-between p-2 rounded-lg cursor-pointer {active}"
                ).on("click", lambda cid=conversation_id: select_conversation(cid)):
                    with ui.row().classes("items-center gap-2 min-w-0"):
                        ui.icon("chat_bubble_outline").classes("text-gray-500")
                        ui.label(title).classes("text-sm truncate")
                    ui.button(icon="delete").on(
                        "click.stop", lambda cid=conversation_id: delete_conversation(cid)
                    ).props("flat dense round size=sm color=negative")

    async def delete_document(document_id: str) -> None:
        try:
            deleted = await relay.delete_document(document_id)
        except RelayError as e:
            ui.notify(e.message, type="negative")
            return
        if deleted:
            session.remove_document(document_id)
            refresh_documents()

    async def load_documents() -> None:
        try:
            documents = await relay.list_documents()
        except RelayError as e:
            ui.notify(f"Could not list documents: {e.message}", type="warning")
            return
        session.documents = [
            {"id": str(doc["id"]), "name": doc.get("title") or str(doc["id"])} for doc in documents
        ]
        refresh_documents()

    def refresh_documents() -> None:
        documents_container.clear()
        with documents_container:
            if not session.documents:
                ui.label("No documents uploaded yet").classes("text-sm text-gray-500")
            for document in session.documents:
                with ui.row().classes("w-full items-center justify-between p-2 bg-gray-50 rounded"):
                    ui.label(document["name"]).classes("text-sm truncate")
                    ui.button(
                        icon="delete",
                        on_click=lambda did=document["id"]: delete_document(did),
                    ).props("flat dense round size=sm color=negative")

    async def handle_upload(e: events.UploadEventArguments) -> None:
        try:
            result = await relay.upload(e.file.name, await e.file.read())
        except RelayError as err:
            ui.notify(f"Upload failed: {err.message}", type="negative")
            return
        session.add_document({"id": result["documentId"], "name": e.file.name})
        refresh_documents()
        refresh_messages()

    # === UI Layout ===
    with ui.row().classes("w-full h-screen gap-0 no-wrap"):
        with ui.column().classes("sidebar w-80 h-full p-4 gap-4"):
            ui.label("R2R Chatbot").classes("text-xl font-bold text-gray-800")
            with ui.tabs().classes("w-full") as tabs:
                conversations_tab = ui.tab("Conversations", icon="forum")
                documents_tab = ui.tab("Documents", icon="description")
            with ui.tab_panels(tabs, value=conversations_tab).classes("w-full flex-grow"):
                with ui.tab_panel(conversations_tab):
                    ui.button("New conversation", icon="add", on_click=create_conversation).props(
                        "flat color=primary"
                    )
                    conversations_container = ui.column().classes("w-full gap-1")
                with ui.tab_panel(documents_tab):
                    ui.upload(label="Upload document", auto_upload=True, on_upload=handle_upload).props(
                        "accept=.pdf,.doc,.docx,.txt,.md"
                    ).classes("w-full")
                    documents_container = ui.column().classes("w-full gap-1")

        with ui.column().classes("flex-grow h-full gap-0"):
            with ui.scroll_area().classes("flex-grow w-full"):
                messages_container = ui.column().classes("w-full max-w-4xl mx-auto p-4 gap-4")

            with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t"):
                input_field = (
                    ui.textarea(placeholder="Type a message...")
                    .props("autogrow outlined dense rows=1")
                    .classes("flex-grow")
                    .on("keydown.enter.prevent", send_message)
                )
                send_btn = ui.button(icon="send", on_click=send_message).props("round unelevated")

    refresh_messages()
    refresh_documents()
    ui.timer(0.1, refresh_conversations, once=True)
    ui.timer(0.1, load_documents, once=True)


def main() -> None:
    ui.run(title="R2R Chatbot", port=8080, reload=False)


if __name__ == "__main__":
    main()
