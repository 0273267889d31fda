"""Style command: badge appearance preferences."""

from __future__ import annotations

import click
from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from ..badges import BadgeFormat, BadgePreferences, BadgeStyle, DownloadCount, parse_color
from ._common import CliState, console, reported_errors


def _show_preferences(preferences: BadgePreferences) -> None:
    table = Table(title="Badge Preferences", show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("style", preferences.style.value)
    table.add_row("format", preferences.format.value)
    table.add_row("count", f"{preferences.count.value} ({preferences.count.description})")
    table.add_row("label", escape(preferences.label))
    table.add_row("label-color", preferences.label_color or "[dim]default[/]")
    table.add_row("color", preferences.color or "[dim]default[/]")
    console.print()
    console.print(table)
    console.print()


def register_style_commands(main: click.Group) -> None:
    """Register the style command."""

    @main.command("style")
    @click.option("--style", "badge_style", default=None,
                  help=f"Badge style: {', '.join(s.value for s in BadgeStyle)}.")
    @click.option("--format", "badge_format", default=None,
                  help=f"Output format: {', '.join(f.value for f in BadgeFormat)}.")
    @click.option("--count", default=None,
                  help=f"Counter shown: {', '.join(c.value for c in DownloadCount)}.")
    @click.option("--label", default=None, help="Text on the left side of the badge.")
    @click.option("--label-color", default=None, help="Hex color of the label, or 'default'.")
    @click.option("--color", default=None, help="Hex color of the counter, or 'default'.")
    @click.pass_obj
    def style(state: CliState, badge_style, badge_format, count, label, label_color, color):
        """Change how badges look. Without options, show the current settings."""
        updates = {
            "style": badge_style,
            "format": badge_format,
            "count": count,
            "label": label,
            "label_color": label_color,
            "color": color,
        }
        updates = {key: value for key, value in updates.items() if value is not None}

        with reported_errors():
            state.require_local("style")
            preferences = state.store.load_preferences()
            if not updates:
                _show_preferences(preferences)
                return

            for option, key in (("--label-color", "label_color"), ("--color", "color")):
                if key not in updates:
                    continue
                try:
                    parse_color(updates[key])
                except ValueError as exc:
                    console.print(
                        f"\n  [bold red]Invalid {option}:[/] "
                        f"'{escape(updates[key])}' {escape(str(exc))}\n"
                    )
                    raise SystemExit(1)

            try:
                preferences = BadgePreferences.model_validate(
                    {**preferences.model_dump(), **updates}
                )
            except ValidationError as exc:
                for error in exc.errors():
                    field_name = ".".join(str(part) for part in error["loc"])
                    console.print(f"\n  [bold red]Invalid {field_name}:[/] {escape(error['msg'])}")
                console.print()
                raise SystemExit(1)

            state.store.save_preferences(preferences)
            console.print("\n  [green]Badge preferences updated[/]")
            _show_preferences(preferences)
