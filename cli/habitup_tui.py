#!/usr/bin/env python3
"""HabitUP TUI — terminal habit dashboard powered by Textual."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Label, Static

from habitup import (
    AnalyticsReport,
    CompletionStatus,
    ConnectionRegistry,
    HabitService,
    HabitUpError,
    build_service,
    data_root,
    load_settings,
)
from habitup.settings import LOG_FORMAT

CSS = """
#main-layout {
    height: 1fr;
}

#left-pane {
    width: 3fr;
    min-width: 40;
    border-right: tall $primary-background-darken-2;
    padding: 0 1;
}

#right-pane {
    width: 2fr;
    min-width: 30;
    padding: 0 1;
}

#habits-table {
    height: 1fr;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#details {
    padding: 0 1;
}
"""


def _owner_id() -> str:
    """HABITUP_OWNER, else the first configured user, else 'guest'."""
    owner = os.environ.get("HABITUP_OWNER", "")
    if owner:
        return owner
    users = load_settings().users
    return next(iter(users), "guest")


def format_report(name: str, report: AnalyticsReport) -> str:
    lines = [
        f"{name} — last {report.window_days} days",
        "",
        f"Completion rate: {report.completion_rate:.2f}%",
        f"Completed {report.completed_days} · partial {report.partial_days} · "
        f"missed {report.missed_days} · skipped {report.skipped_days}",
        f"Streak: {report.current_streak} (best {report.longest_streak})",
        "",
        "Weeks (oldest first):",
        "  " + " ".join(f"{w.completed}/7" for w in report.weekly_breakdown),
        "",
        "By weekday:",
    ]
    for day, stat in report.day_of_week_stats.items():
        lines.append(f"  {day[:3]}  {stat.completed}/{stat.total}  {stat.rate:.0f}%")
    lines.append("")
    lines.extend(f"• {insight}" for insight in report.insights)
    return "\n".join(lines)


class AppChannel:
    """Delivers habit events to the running app as toasts."""

    def __init__(self, app: App) -> None:
        self.app = app

    def send(self, event: str, payload: dict[str, Any]) -> None:
        if event == "on_streak_milestone":
            message = f"{payload['habitName']}: {payload['streak']}-day streak!"
            self.app.call_from_thread(self.app.notify, message, title="Milestone")
        elif event == "on_habit_complete":
            status = payload["record"]["completionStatus"].lower()
            message = f"{payload['habitName']} logged as {status} · streak {payload['currentStreak']}"
            self.app.call_from_thread(self.app.notify, message, title="Logged")


# ── Main app ───────────────────────────────────────────────────


class HabitUpApp(App):
    """HabitUP — habits, streaks and analytics in the terminal."""

    TITLE = "HabitUP"
    CSS = CSS

    BINDINGS = [
        Binding("c", "mark('COMPLETED')", "Complete"),
        Binding("p", "mark('PARTIAL')", "Partial"),
        Binding("k", "mark('SKIPPED')", "Skip"),
        Binding("a", "show_analytics", "Analytics"),
        Binding("g", "show_suggestions", "Suggestions"),
        Binding("w", "show_weekly", "Week"),
        Binding("e", "export", "Export"),
        Binding("r", "refresh", "Refresh"),
        Binding("q", "quit", "Quit"),
    ]

    selected_habit: reactive[int | None] = reactive(None)

    def __init__(self, service: HabitService, registry: ConnectionRegistry, owner_id: str) -> None:
        super().__init__()
        self.service = service
        self.registry = registry
        self.owner_id = owner_id
        self._channel = AppChannel(self)
        self._names: dict[int, str] = {}

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(
            VerticalScroll(
                Label(f"Habits — {self.owner_id}", classes="section-title"),
                DataTable(id="habits-table", cursor_type="row"),
                id="left-pane",
            ),
            VerticalScroll(
                Label("Details", classes="section-title"),
                Static(id="details"),
                id="right-pane",
            ),
            id="main-layout",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.registry.register(self.owner_id, self._channel)
        table = self.query_one("#habits-table", DataTable)
        table.add_columns("ID", "Habit", "Category", "Difficulty", "Streak", "Best", "Active")
        self._load_habits()

    def on_unmount(self) -> None:
        self.registry.unregister(self.owner_id, self._channel)

    def _load_habits(self) -> None:
        table = self.query_one("#habits-table", DataTable)
        table.clear()
        self._names.clear()
        for habit in self.service.list_habits(self.owner_id):
            self._names[habit.habit_id] = habit.name
            table.add_row(
                str(habit.habit_id),
                habit.name,
                habit.category.value.replace("_", " ").title(),
                habit.difficulty.value.title(),
                str(habit.current_streak),
                str(habit.longest_streak),
                "yes" if habit.is_active else "no",
                key=str(habit.habit_id),
            )
        if not self._names:
            self._show("No habits yet. Press g for suggestions.")

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key is not None and event.row_key.value is not None:
            self.selected_habit = int(event.row_key.value)

    def _show(self, text: str) -> None:
        self.query_one("#details", Static).update(text)

    # ── Actions ────────────────────────────────────────────────

    def action_mark(self, status: str) -> None:
        if self.selected_habit is None:
            self.notify("Select a habit first", severity="warning")
            return
        self._do_mark(self.selected_habit, CompletionStatus(status))

    @work(thread=True)
    def _do_mark(self, habit_id: int, status: CompletionStatus) -> None:
        """Run the completion pipeline off the UI thread; the channel reports back."""
        try:
            self.service.on_habit_marked_complete(self.owner_id, habit_id, status=status)
        except HabitUpError as e:
            self.call_from_thread(self.notify, e.message, title="Error", severity="error")
            return
        self.call_from_thread(self._load_habits)

    def action_show_analytics(self) -> None:
        if self.selected_habit is None:
            self.notify("Select a habit first", severity="warning")
            return
        habit_id = self.selected_habit
        try:
            report = self.service.on_analytics_requested(self.owner_id, habit_id)
        except HabitUpError as e:
            self.notify(e.message, title="Error", severity="error")
            return
        self._show(format_report(self._names.get(habit_id, str(habit_id)), report))

    def action_show_suggestions(self) -> None:
        suggestions = self.service.on_suggestions_requested(self.owner_id)
        lines = ["Suggested habits", ""]
        for s in suggestions:
            lines.append(f"[{s.priority.value}] {s.name} ({s.category.value.title()}, {s.difficulty.value.lower()})")
            lines.append(f"    {s.description}")
        self._show("\n".join(lines))

    def action_show_weekly(self) -> None:
        summary = self.service.weekly_summary(self.owner_id)
        pending = self.service.pending_reminders(self.owner_id)
        lines = [
            f"Week {summary.week_start} → {summary.week_end}",
            "",
            f"Completed: {summary.completed}",
            f"Active habits: {summary.active_habits}",
            f"Completion rate: {summary.completion_rate:.1f}%",
        ]
        if pending:
            lines += ["", "Still open today:"] + [f"  • {h.name}" for h in pending]
        self._show("\n".join(lines))

    def action_export(self) -> None:
        path = self.service.export_owner_data(self.owner_id)
        self.notify(f"Exported to {path}", title="Export")

    def action_refresh(self) -> None:
        self._load_habits()


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = data_root()
    if not root.exists():
        print(f"Data root not found: {root}")
        print("Set HABITUP_ROOT or start the API once to create it.")
        sys.exit(1)

    # Log to a file; the terminal belongs to the UI
    settings = load_settings(root)
    logging.basicConfig(
        filename=str(root / "habitup-tui.log"),
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
    )

    registry = ConnectionRegistry()
    service = build_service(root, registry)
    HabitUpApp(service, registry, _owner_id()).run()


if __name__ == "__main__":
    main()
