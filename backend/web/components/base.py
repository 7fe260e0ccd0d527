"""
Base component for server-rendered MALI Ed pages.

Components return HTML strings; anything user-controlled goes through
`escape()` or `attributes()`.
"""

from typing import Optional, Any
import html


class Component:
    """Base class for all UI components"""

    def render(self) -> str:
        raise NotImplementedError("Subclasses must implement render()")

    @staticmethod
    def escape(text: Optional[Any]) -> str:
        """HTML-escape `text`; None renders as an empty string."""
        return html.escape(str(text)) if text is not None else ""

    @staticmethod
    def classes(*names: str, **conditionals: bool) -> str:
        """`classes("nav-item", active=True)` -> "nav-item active"."""
        return " ".join([*names, *(name for name, on in conditionals.items() if on)])

    @staticmethod
    def attributes(**attrs: Any) -> str:
        """Render keyword arguments as HTML attributes in call order.

        `class_` becomes `class`, other underscores become dashes. True renders
        a bare attribute; False and None are dropped.
        """
        result = []
        for key, value in attrs.items():
            key = key[:-1] if key.endswith("_") else key.replace("_", "-")
            if value is True:
                result.append(key)
            elif value is not False and value is not None:
                result.append(f'{key}="{html.escape(str(value))}"')
        return " ".join(result)
