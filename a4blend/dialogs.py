# a4blend/dialogs.py
from pathlib import Path

from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label


class FolderDialog(ModalScreen):
    """Ask for a new music folder. Dismisses with the path, or None on cancel."""

    def __init__(self, current_folder: str | None):
        super().__init__()
        self.current_folder = current_folder or ""

    def compose(self):
        yield Vertical(
            Label("Change Music Folder", id="dlg_title"),
            Input(value=self.current_folder, id="dlg_input"),
            Label("", id="dlg_error"),
            Horizontal(
                Button("Cancel", id="cancel"),
                Button("OK", id="ok", variant="primary"),
                id="dlg_buttons",
            ),
            id="dlg_container",
        )

    def on_mount(self):
        self.query_one("#dlg_input", Input).focus()

    def _submit(self, value):
        folder = Path(value.strip()).expanduser()
        if not value.strip() or not folder.is_dir():
            self.query_one("#dlg_error", Label).update(f"Not a folder: {value}")
            return
        self.dismiss(str(folder))

    def on_button_pressed(self, event: Button.Pressed):
        if event.button.id == "ok":
            self._submit(self.query_one("#dlg_input", Input).value)
        else:
            self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted):
        self._submit(event.value)
