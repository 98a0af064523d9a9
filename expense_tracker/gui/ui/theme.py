"""Token-driven stylesheet for the expense tracker window."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

TOKEN_PATH = Path(__file__).with_name("tokens.json")


def load_tokens(path: Path | str | None = None) -> dict[str, Any]:
    """Load design tokens from disk."""

    location = Path(path) if path is not None else TOKEN_PATH
    with location.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve(token_map: dict[str, Any], key: str, fallback: str) -> str:
    return str(token_map.get(key, fallback))


def build_stylesheet(tokens: dict[str, Any] | None = None) -> str:
    """Return a QSS stylesheet composed from design tokens."""

    tokens = tokens or load_tokens()
    primary = _resolve(tokens, "color.primary", "#2F6FEB")
    danger = _resolve(tokens, "color.danger", "#D1242F")
    surface = _resolve(tokens, "color.surface", "#F6F8FA")
    card = _resolve(tokens, "color.card", "#FFFFFF")
    text = _resolve(tokens, "color.text", "#1F2328")
    font_family = _resolve(tokens, "font.family", "Inter")
    heading_size = _resolve(tokens, "font.heading_size", "22")
    radius_small = _resolve(tokens, "radius.small", "6")
    radius_large = _resolve(tokens, "radius.large", "10")

    return f"""
    QWidget {{
        font-family: {font_family};
        color: {text};
        background-color: {surface};
    }}
    QLabel#heading, QLabel#authTitle {{
        font-size: {heading_size}px;
        font-weight: 600;
    }}
    QPushButton {{
        background-color: {primary};
        color: white;
        border-radius: {radius_small}px;
        padding: 6px 12px;
    }}
    QPushButton:disabled {{
        background-color: rgba(0, 0, 0, 0.2);
    }}
    QGroupBox {{
        background-color: {card};
        border: 1px solid rgba(0, 0, 0, 0.12);
        border-radius: {radius_large}px;
        padding: 12px;
    }}
    QGroupBox QPushButton {{
        background-color: {danger};
    }}
    QLineEdit, QPlainTextEdit {{
        background: {card};
        border: 1px solid rgba(0, 0, 0, 0.2);
        border-radius: {radius_small}px;
        padding: 6px;
    }}
    QStatusBar {{
        background: rgba(0, 0, 0, 0.05);
    }}
    """


def apply_tokens(path: Path | str | None = None) -> str:
    """Load tokens and return a stylesheet ready to be applied."""

    return build_stylesheet(load_tokens(path))


__all__ = ["apply_tokens", "build_stylesheet", "load_tokens"]
