from __future__ import annotations

import io
from typing import Optional

from rich.console import Console

from ghinbox.adapters.notification_formatting import build_table, format_action, format_line, format_state
from ghinbox.core.models import Meta, Notification, Notifications, Repository, Subject, User


def _notification(
    *,
    notification_id: str = "1",
    title: str = "hello",
    state: Optional[str] = None,
    author: str = "",
    done: bool = False,
) -> Notification:
    return Notification(
        id=notification_id,
        reason="mention",
        subject=Subject(title=title, type="Issue", state=state),
        repository=Repository(full_name="octo/repo"),
        author=User(login=author),
        meta=Meta(done=done),
    )


def _render(renderable) -> str:
    console = Console(file=io.StringIO(), width=200, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


def test_format_line_escapes_user_text() -> None:
    line = format_line(_notification(title="[bold]not markup[/bold]", author="dependabot[bot]"))
    rendered = _render(line)
    assert "[bold]not markup[/bold]" in rendered
    assert "by dependabot[bot]" in rendered
    assert "octo/repo" in rendered


def test_format_state_styles_known_states() -> None:
    assert format_state(_notification(state="merged")) == "[magenta]merged[/magenta]"
    assert format_state(_notification(state="draft")) == "[dim]draft[/dim]"
    assert format_state(_notification()) == ""


def test_format_action_prefixes_verb() -> None:
    rendered = _render(format_action("DONE", "red", _notification()))
    assert rendered.startswith("DONE ")


def test_build_table_hides_done_unless_asked() -> None:
    notifications = Notifications(
        [
            _notification(notification_id="1", title="open one"),
            _notification(notification_id="2", title="done one", done=True),
            None,
        ]
    )

    assert "done one" not in _render(build_table(notifications))
    assert "done one" in _render(build_table(notifications, include_done=True))
