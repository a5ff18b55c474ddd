"""prompt_toolkit styles for the trigger picker and the drop confirmation."""

from __future__ import annotations

from prompt_toolkit.styles import Style

_MUTED = "ansibrightblack"

_BASE = {
    "instruction": _MUTED,
    "disabled": _MUTED,
    "error": "bold ansired",
}

# event headings in the picker are separators
PICKER_STYLE = Style.from_dict(
    {
        **_BASE,
        "question": "bold ansicyan",
        "answer": "bold ansibrightgreen",
        "pointer": "bold ansibrightgreen",
        "highlighted": "bold ansibrightgreen",
        "selected": "bold ansibrightgreen",
        "checkbox": _MUTED,
        "checkbox-selected": "bold ansibrightgreen",
        "separator": "bold ansiyellow",
    }
)

DROP_CONFIRM_STYLE = Style.from_dict(
    {
        **_BASE,
        "question": "bold ansibrightred",
        "answer": "bold ansibrightred",
    }
)
