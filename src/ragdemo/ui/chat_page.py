"""NiceGUI page: data source management and streamed chat."""

from nicegui import events, ui

from ragdemo.models.schemas import SourceType
from ragdemo.ui.session import ChatMessage, SessionController, SourceStatus

CUSTOM_CSS = """
<style>
    body { background: #f5f5f5; }
    .panel {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
    }
    .header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); }
    .message-user {
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }
    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }
    .message-assistant pre { background: #1f2937; color: #f3f4f6; padding: 0.75rem; border-radius: 8px; }
</style>
"""

STATUS_COLORS = {
    SourceStatus.UPLOADING: "blue",
    SourceStatus.INDEXING: "orange",
    SourceStatus.PROCESSING: "orange",
    SourceStatus.INDEXED: "green",
    SourceStatus.ERROR: "red",
}

SOURCE_ICONS = {
    SourceType.TEXT: "description",
    SourceType.FILE: "attach_file",
    SourceType.WEBSITE: "language",
}



def copy_message(msg: ChatMessage) -> None:
    ui.clipboard.write(msg.content)
    ui.notify("Copied to clipboard")


@ui.page("/")
def chat_page() -> None:
    """Main page: sources on the left, conversation on the right."""
    ui.add_head_html(CUSTOM_CSS)

    typing_view: ui.markdown
    typing_row: ui.row
    chat_input: ui.textarea
    send_btn: ui.button

    def on_change() -> None:
        render_sources.refresh()
        render_messages.refresh()
        typing_row.set_visibility(session.is_streaming)
        typing_view.set_content(session.partial_answer or "_Thinking..._")
        if session.can_chat:
            send_btn.enable()
            chat_input.enable()
        else:
            send_btn.disable()
            chat_input.disable()

    session = SessionController(on_change=on_change)

    @ui.refreshable
    def render_sources() -> None:
        if not session.sources:
            ui.label("No data sources yet").classes("text-sm text-gray-400")
            return
        for source in session.sources:
            with ui.row().classes("w-full items-center gap-2 no-wrap"):
                ui.icon(SOURCE_ICONS[source.type]).classes("text-gray-500")
                ui.label(source.display_name).classes("text-sm flex-grow truncate")
                ui.badge(source.status.value, color=STATUS_COLORS[source.status])
                ui.button(
                    icon="delete",
                    on_click=lambda s=source: session.remove_source(s.id),
                ).props("flat round dense size=sm")

    def render_message(msg: ChatMessage) -> None:
        is_user = msg.role == "user"
        with ui.row().classes(f"w-full {'justify-end' if is_user else 'justify-start'}"):
            with ui.column().classes("max-w-[80%] gap-1"):
                with ui.element("div").classes(
                    f"px-4 py-3 {'message-user' if is_user else 'message-assistant'}"
                ):
                    if is_user:
                        ui.label(msg.content).classes("text-sm whitespace-pre-wrap")
                    else:
                        ui.markdown(msg.content).classes("text-sm")
                with ui.row().classes(f"items-center gap-1 {'self-end' if is_user else 'self-start'}"):
                    ui.label(msg.timestamp.strftime("%I:%M %p")).classes("text-[10px] text-gray-400")
                    if not is_user:
                        ui.button(
                            icon="content_copy",
                            on_click=lambda m=msg: copy_message(m),
                        ).props("flat round dense size=xs").tooltip("Copy")

    @ui.refreshable
    def render_messages() -> None:
        if not session.messages:
            with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                ui.icon("forum").classes("text-5xl text-gray-300")
                ui.label("Add a data source, then ask a question").classes(
                    "text-lg text-gray-400"
                )
            return
        for msg in session.messages:
            render_message(msg)

    async def add_text(textarea: ui.textarea) -> None:
        content = textarea.value or ""
        textarea.value = ""
        await session.submit_text(content)

    async def add_website(url_input: ui.input) -> None:
        url = url_input.value or ""
        url_input.value = ""
        source = await session.submit_website(url)
        if source is not None and source.status is SourceStatus.ERROR:
            ui.notify(f"Failed to index {source.display_name}", type="negative")

    async def add_file(e: events.UploadEventArguments) -> None:
        source = await session.submit_file(e.file.name, await e.file.read())
        if source is not None and source.status is SourceStatus.ERROR:
            ui.notify(f"Failed to index {source.display_name}", type="negative")

    async def send_message() -> None:
        query = chat_input.value or ""
        if not query.strip() or not session.can_chat:
            return
        chat_input.value = ""
        await session.send_chat(query)
        if session.last_error:
            ui.notify(session.last_error, type="negative")

    with ui.row().classes("w-full header px-5 py-4 items-center"):
        ui.icon("smart_toy").classes("text-white text-3xl")
        ui.label("RAG Assistant").classes("text-lg font-semibold text-white")

    with ui.row().classes("w-full p-4 gap-4 no-wrap items-start"):
        with ui.column().classes("w-80 panel p-4 gap-3"):
            ui.label("Data sources").classes("text-base font-semibold")

            text_area = ui.textarea(placeholder="Paste text to index...").props(
                "outlined autogrow"
            ).classes("w-full")
            ui.button("Add text", icon="upload", on_click=lambda: add_text(text_area))

            ui.upload(
                label="Upload files",
                multiple=True,
                auto_upload=True,
                on_upload=add_file,
            ).props("accept=.pdf,.csv,.docx,.doc,.json,.txt,.md").classes("w-full")

            url_input = ui.input(placeholder="https://example.com").classes("w-full")
            ui.button("Add website", icon="language", on_click=lambda: add_website(url_input))

            ui.separator()
            render_sources()

        with ui.column().classes("flex-grow panel").style("height: calc(100vh - 8rem)"):
            with ui.scroll_area().classes("flex-grow w-full bg-gray-50"):
                with ui.column().classes("w-full p-5 gap-4"):
                    render_messages()
                    with ui.row().classes("w-full justify-start") as typing_row:
                        with ui.element("div").classes("px-4 py-3 message-assistant max-w-[80%]"):
                            typing_view = ui.markdown("_Thinking..._").classes("text-sm")
                    typing_row.set_visibility(False)

            with ui.row().classes("w-full p-4 gap-3 items-end border-t no-wrap"):
                chat_input = (
                    ui.textarea(placeholder="Ask a question about your sources...")
                    .props("autogrow outlined dense rows=1")
                    .classes("flex-grow")
                    .on("keydown.enter.prevent", send_message)
                )
                send_btn = ui.button(icon="send", on_click=send_message).props(
                    "round unelevated"
                )
                ui.button(icon="delete_sweep", on_click=session.clear_chat).props(
                    "flat round"
                ).tooltip("Clear conversation")

    chat_input.disable()
    send_btn.disable()
