from __future__ import annotations

from typing import Any

from ddlhooks.core.errors import DeparseError


class SourceTextExpressions:
    """
    Expression capability for nodes whose expressions are kept as source text.

    Nodes decoded from JSON carry CHECK / DEFAULT expressions and view
    queries as plain strings; this renders them back with surrounding
    whitespace and trailing semicolons removed.
    """

    def _text(self, value: Any, what: str) -> str:
        if isinstance(value, bool) or value is None:
            raise DeparseError(f"cannot render {what} {value!r}")
        if isinstance(value, (int, float)):
            return str(value)
        if not isinstance(value, str):
            raise DeparseError(f"{what} is not source text: {type(value).__name__}")
        text = " ".join(value.split()).rstrip(";").rstrip()
        if not text:
            raise DeparseError(f"empty {what}")
        return text

    def expr_to_text(self, expr: Any) -> str:
        return self._text(expr, "expression")

    def query_to_text(self, query: Any) -> str:
        return self._text(query, "query")
