from __future__ import annotations  # Shared prompt formatting helpers for interview agents

from typing import Iterable, Sequence


def clamp_text(text: str, limit: int = 600) -> str:  # Compact whitespace and clip length
    compact = " ".join(text.split())
    if len(compact) <= limit:
        return compact
    return compact[: limit - 1].rstrip() + "…"


def bullet_list(entries: Iterable[str]) -> str:  # Render entries as markdown bullets
    lines = [item.strip() for item in entries if item and item.strip()]
    if not lines:
        return "None provided."
    return "\n".join(f"- {line}" for line in lines)


def comma_list(entries: Iterable[str]) -> str:  # Join entries inline, tolerating empties
    items = [item.strip() for item in entries if item and item.strip()]
    return ", ".join(items) if items else "None provided."


def average_text(scores: Sequence[float]) -> str:  # Mean score label for prompts
    if not scores:
        return "N/A"
    return f"{sum(scores) / len(scores):.1f}"


__all__ = ["average_text", "bullet_list", "clamp_text", "comma_list"]
