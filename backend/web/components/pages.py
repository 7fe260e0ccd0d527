"""
Page bodies for the dashboard.

Each component renders only the <main> content; routes wrap it in `Layout`.
"""

from typing import List, Optional

from .base import Component

LOGO_SRC = "/static/img/mali-ed-logo-white.svg"
LOGO_WIDTH = 400
LOGO_HEIGHT = 120

_NOTICES = {
    "no_primary_class": (
        "You don't have a primary class yet. Pick a class below, or ask your "
        "team owner to mark one as primary for you."
    ),
}


class HomePage(Component):
    """Dashboard home: the MALI Ed logo, centred on a dark background"""

    def render(self) -> str:
        img = self.attributes(
            src=LOGO_SRC,
            alt="MALI Ed",
            width=LOGO_WIDTH,
            height=LOGO_HEIGHT,
            class_="home-logo",
        )
        return f"""
        <div class="home-hero">
            <img {img}>
        </div>"""


class ClassListPage(Component):
    def __init__(self, classes: List[dict], error: Optional[str] = None):
        self.records = classes
        self.error = error

    def render(self) -> str:
        notice = ""
        message = _NOTICES.get(self.error or "")
        if message:
            notice = f'<div class="alert alert-warning" role="alert">{self.escape(message)}</div>'
        if self.records:
            rows = "".join(self._render_row(c) for c in self.records)
            body = f'<ul class="class-list">{rows}</ul>'
        else:
            body = '<p class="text-muted">You are not assigned to any classes.</p>'
        return f"""
        <div class="container">
            <h1>Classes</h1>
            {notice}
            {body}
        </div>"""

    def _render_row(self, cls: dict) -> str:
        cid = self.escape(cls.get("id"))
        badge = '<span class="badge">Primary</span>' if cls.get("is_primary") else ""
        return f"""
            <li class="class-item">
                <span class="class-name">{self.escape(cls.get("name"))}</span>
                <span class="class-year">{self.escape(cls.get("calendar_year"))}</span>
                {badge}
                <a href="/dashboard/grading/{cid}">Grading</a>
                <a href="/dashboard/planning/{cid}">Planning</a>
            </li>"""


class ClassLandingPage(Component):
    """Entry page for grading/planning of one class"""

    _TITLES = {"grading": "Grading", "planning": "Planning"}

    def __init__(self, destination: str, cls: dict):
        self.destination = destination
        self.cls = cls

    @property
    def title(self) -> str:
        return f"{self._TITLES.get(self.destination, self.destination.title())} · {self.cls.get('name', '')}"

    def render(self) -> str:
        return f"""
        <div class="container" data-class-id="{self.escape(self.cls.get("id"))}">
            <h1>{self.escape(self.title)}</h1>
            <p class="text-muted">Calendar year {self.escape(self.cls.get("calendar_year"))}</p>
            <p><a href="/dashboard/classes">Switch class</a></p>
        </div>"""


class SignInPage(Component):
    def __init__(self, *, next_path: str = "/", error: Optional[str] = None, email: str = ""):
        self.next_path = next_path
        self.error = error
        self.email = email

    def render(self) -> str:
        error_html = (
            f'<div class="alert alert-error" role="alert">{self.escape(self.error)}</div>' if self.error else ""
        )
        return f"""
        <div class="container auth-card">
            <h1>Sign in</h1>
            {error_html}
            <form method="post" action="/sign-in" class="auth-form">
                <input type="hidden" name="next" value="{self.escape(self.next_path)}">
                <label class="form-label" for="email">Email</label>
                <input class="form-input" id="email" type="email" name="email" value="{self.escape(self.email)}" required autocomplete="email">
                <label class="form-label" for="password">Password</label>
                <input class="form-input" id="password" type="password" name="password" required autocomplete="current-password">
                <button type="submit" class="btn btn-primary">Sign in</button>
            </form>
        </div>"""
