"""Admin modal screen: backup and backup-and-clear."""

from __future__ import annotations

import logging
from datetime import datetime
from functools import partial
from pathlib import Path

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from counter_pos.admin import AdminGate, backup, backup_and_clear, export_bills_csv
from counter_pos.backend import Backend
from counter_pos.errors import PosError

logger = logging.getLogger(__name__)


class AdminModal(ModalScreen[None]):
    """Shown only after ``AdminGate.login`` succeeded."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("b", "backup", "Backup"),
        ("r", "backup_and_clear", "Backup + clear"),
        ("y", "confirm", "Confirm"),
        ("n", "cancel_confirm", "Cancel"),
        ("l", "logout", "Logout"),
    ]

    CSS = """
    AdminModal {
        align: center middle;
        background: $background 60%;
    }

    #admin-dialog {
        width: 72;
        height: auto;
        border: round $error;
        background: $panel;
        padding: 1 2;
    }

    #admin-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #admin-status {
        color: white;
        margin-bottom: 1;
    }

    #admin-help {
        color: #dddddd;
    }
    """

    def __init__(self, backend: Backend, gate: AdminGate, export_dir: str | Path) -> None:
        super().__init__()
        self.backend = backend
        self.gate = gate
        self.export_dir = Path(export_dir)
        self.awaiting_confirm = False
        self.status = "Backups are written as CSV files to " + str(self.export_dir)

    def compose(self) -> ComposeResult:
        with Container(id="admin-dialog"):
            yield Static("Admin Panel", id="admin-title")
            yield Static(id="admin-status")
            yield Static(id="admin-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def _exporter(self):
        stamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
        return partial(export_bills_csv, directory=self.export_dir, stamp=stamp)

    def action_close(self) -> None:
        self.dismiss()

    def action_logout(self) -> None:
        self.gate.logout()
        self.dismiss()

    def action_backup(self) -> None:
        self.awaiting_confirm = False
        try:
            paths = backup(self.backend.ledger, self._exporter())
        except (PosError, OSError) as exc:
            logger.error("admin_backup_failed error=%s", exc)
            self.status = f"Backup failed, nothing changed: {exc}"
        else:
            self.status = "No bills to backup!" if paths is None else f"Backup saved as {paths[0]}"
        self._refresh_content()

    def action_backup_and_clear(self) -> None:
        self.awaiting_confirm = True
        self.status = "Export all bills, delete them and reset the bill number? Y confirm, N cancel."
        self._refresh_content()

    def action_cancel_confirm(self) -> None:
        if not self.awaiting_confirm:
            return
        self.awaiting_confirm = False
        self.status = "Cancelled."
        self._refresh_content()

    def action_confirm(self) -> None:
        if not self.awaiting_confirm:
            return
        self.awaiting_confirm = False
        try:
            paths = backup_and_clear(self.backend.ledger, self.backend.sequence, self._exporter())
        except (PosError, OSError) as exc:
            logger.error("admin_backup_and_clear_failed error=%s", exc)
            self.status = f"Backup & clear failed: {exc}"
        else:
            if paths is None:
                self.status = "No bills to backup!"
            else:
                self.status = f"Backup saved as {paths[0]}. Bills cleared and bill number reset."
        self._refresh_content()

    def _refresh_content(self) -> None:
        self.query_one("#admin-status", Static).update(self.status)
        if self.awaiting_confirm:
            help_text = "Y confirm, N cancel"
        else:
            help_text = "B backup, R backup + clear + reset, L logout, Esc/q close"
        self.query_one("#admin-help", Static).update(help_text)
