"""Chat-ready rendering of roll results."""

from __future__ import annotations

from dicebox.dice.results import RollResult

CRITICAL_BANNERS: dict[str, str] = {
    "success": "**NATURAL 20! Critical Success!**",
    "failure": "**Natural 1. Critical Failure.**",
}


def format_roll_for_display(result: RollResult, label: str | None = None) -> str:
    """Render a single roll as Markdown.

    Args:
        result: The roll to render.
        label: Optional heading, e.g. "Attack Roll".

    Returns:
        Newline-joined lines: label, expression and trace, critical banner.
    """
    lines: list[str] = []
    if label:
        lines.append(f"**{label}**")
    lines.append(f"`{result.expression}` → {result.details}")
    if result.critical is not None:
        lines.append(CRITICAL_BANNERS[result.critical])
    return "\n".join(lines)


def format_multiple_rolls(results: list[RollResult], label: str | None = None) -> str:
    """Render a batch of rolls as a numbered list with sum and average."""
    lines: list[str] = []
    if label:
        lines.append(f"**{label}** ({len(results)}x)")
    for i, result in enumerate(results, start=1):
        lines.append(f"{i}. {format_roll_for_display(result)}")
    if results:
        total = sum(r.total for r in results)
        average = total / len(results)
        lines.append("")
        lines.append(f"Total: **{total}** | Average: **{average:.1f}**")
    return "\n".join(lines)
