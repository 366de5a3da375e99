"""
BayBridge Classroom page - live parent/teacher updates in the terminal.
Teachers post notes; parents watch the timeline, optionally translated.
"""

import os
import sys
from typing import List

import httpx
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, VerticalScroll
from textual.widgets import Header, Footer, Static, Button, Label, Input, Select

from baybridge.client.classroom import ClassroomClient, TimelineItem
from baybridge.client.viewer import TranslationCache, ViewerTranslator
from util.logging import logger
from .timeline import LOCALES, ROLES, badges_line, format_card, status_line

DEFAULT_STUDENT_ID = "demo-student"


class ClassroomApp(App):
    """One viewer/poster session against the classroom API."""

    CSS = """
    .title {
        text-align: center;
        text-style: bold;
        color: cyan;
    }

    .subtitle {
        text-align: center;
        margin-bottom: 1;
        color: gray;
    }

    #controls {
        height: auto;
        padding: 1;
        border: solid white;
    }

    #controls Select, #controls Input {
        width: 1fr;
    }

    #composer {
        height: auto;
        margin-top: 1;
    }

    #translate-status {
        margin-top: 1;
        color: gray;
    }

    #timeline {
        padding: 1;
    }

    .card {
        border: solid green;
        padding: 0 1;
        margin-bottom: 1;
    }

    .badges {
        color: gray;
        text-align: center;
    }
    """

    TITLE = "BayBridge Classroom"
    BINDINGS = [("q", "quit", "Quit")]

    def __init__(self, api_url: str = "http://localhost:8000", student_id: str = DEFAULT_STUDENT_ID,
                 client: ClassroomClient = None):
        super().__init__()
        self.api_url = api_url
        self.student_id = student_id
        self.role = "teacher"
        self.target_locale = "en"
        self.items: List[TimelineItem] = []
        self.client = client or ClassroomClient(api_url)
        self.translator = ViewerTranslator(self.client, TranslationCache())

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("BayBridge Classroom", classes="title")
        yield Static("Real-time parent–teacher updates with translation and an auditable timeline per student.",
                     classes="subtitle")
        yield Container(
            Horizontal(
                Label("Student ID "),
                Input(value=self.student_id, placeholder="student-123", id="student-id"),
                Select(ROLES, value="teacher", allow_blank=False, id="role"),
                Select(LOCALES, value="en", allow_blank=False, id="locale"),
            ),
            Static("", id="translate-status"),
            Horizontal(
                Input(placeholder="Type a classroom update…", id="note"),
                Button("Post", id="post", variant="success"),
                id="composer",
            ),
            id="controls",
        )
        yield VerticalScroll(id="timeline")
        yield Static(badges_line(), classes="badges")
        yield Footer()

    def on_mount(self) -> None:
        logger.info(f"Classroom page started against {self.api_url}")
        self._apply_role()
        self._follow(self.student_id)

    async def on_unmount(self) -> None:
        await self.client.aclose()

    # ---- controls ----

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "note":
            self.post_note()
        elif event.input.id == "student-id":
            student_id = event.value.strip()
            if student_id and student_id != self.student_id:
                self.student_id = student_id
                self._follow(student_id)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "post":
            self.post_note()

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id == "role":
            self.role = event.value
            self._apply_role()
            self.run_worker(self._render_timeline(), group="render")
        elif event.select.id == "locale":
            self.target_locale = event.value
        self._translate()

    def _apply_role(self) -> None:
        self.query_one("#composer").display = self.role == "teacher"
        self.query_one("#translate-status").display = self.role == "parent"

    # ---- posting ----

    def post_note(self) -> None:
        note = self.query_one("#note", Input)
        text = note.value.strip()
        if not text:
            return
        note.value = ""
        self.run_worker(self._post(self.student_id, text, self.role), group="post")

    async def _post(self, student_id: str, text: str, role: str) -> None:
        try:
            await self.client.post_note(student_id, text, author_role=role)
        except httpx.HTTPError as e:
            logger.error(f"Posting note failed: {e}")
            self.notify(f"Could not post update: {e}", title="Post failed", severity="error")

    # ---- stream ----

    def _follow(self, student_id: str) -> None:
        """Reset the timeline and (re)subscribe; any previous subscription is cancelled."""
        self.items = []
        self.run_worker(self._subscribe(student_id), exclusive=True, group="stream")

    async def _subscribe(self, student_id: str) -> None:
        await self._render_timeline()
        try:
            async for batch in self.client.subscribe(student_id):
                self.items.extend(batch)
                await self._render_timeline()
                self._translate()
        except httpx.HTTPError as e:
            logger.error(f"Stream subscription for {student_id} ended: {e}")
            self.notify("Live updates disconnected", title="Stream", severity="warning")

    # ---- translation ----

    def _translate(self) -> None:
        if self.role != "parent":
            return
        self.run_worker(self._translate_items(list(self.items), self.target_locale),
                        exclusive=True, group="translate")

    async def _translate_items(self, items: List[TimelineItem], locale: str) -> None:
        self.translator.reset_status()
        self._show_status()
        await self.translator.translate_items(items, locale)
        self._show_status()
        await self._render_timeline()

    def _show_status(self) -> None:
        self.query_one("#translate-status", Static).update(status_line(self.translator.status))

    async def _render_timeline(self) -> None:
        timeline = self.query_one("#timeline", VerticalScroll)
        await timeline.remove_children()
        if self.items:
            await timeline.mount(*[
                Static(format_card(item, self.role, self.target_locale), classes="card", markup=False)
                for item in self.items
            ])
        timeline.scroll_end(animate=False)


def main():
    """Classroom page entry point."""
    api_url = os.getenv("BAYBRIDGE_API_URL", "http://localhost:8000")
    student_id = os.getenv("BAYBRIDGE_STUDENT_ID", DEFAULT_STUDENT_ID)
    if len(sys.argv) > 1:
        api_url = sys.argv[1]

    try:
        ClassroomApp(api_url=api_url, student_id=student_id).run()
    except KeyboardInterrupt:
        print("\nℹ️  Classroom page interrupted by user")
        logger.info("Classroom page exited via keyboard interrupt")


if __name__ == "__main__":
    main()
