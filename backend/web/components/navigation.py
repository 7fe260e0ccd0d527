"""
Navigation Component for MALI Ed

Sidebar navigation for signed-in teachers; anonymous visitors only see the
sign-in link.
"""

from typing import List, Optional, Tuple

from backend.identity_access.domain import AuthUser
from .base import Component

NAV_ITEMS: List[Tuple[str, str]] = [
    ("/", "Home"),
    ("/dashboard/classes", "Classes"),
    ("/dashboard/grading", "Grading"),
    ("/dashboard/planning", "Planning"),
]


class Navigation(Component):
    """Sidebar with a single active link chosen by best prefix match"""

    def __init__(self, user: Optional[AuthUser] = None, current_path: str = "/"):
        self.user = user
        self.current_path = current_path or "/"

    def active_href(self) -> Optional[str]:
        best: Optional[str] = None
        for href, _ in NAV_ITEMS:
            if href == "/":
                matched = self.current_path == "/"
            else:
                matched = self.current_path == href or self.current_path.startswith(href + "/")
            if matched and (best is None or len(href) > len(best)):
                best = href
        return best

    def render(self) -> str:
        if not self.user:
            links = self._link("/sign-in", "Sign in", active=self.current_path == "/sign-in")
            footer = ""
        else:
            active = self.active_href()
            links = "".join(self._link(href, label, active=href == active) for href, label in NAV_ITEMS)
            footer = f"""
            <div class="sidebar-footer">
                <span class="user-email">{self.escape(self.user.email or "")}</span>
                <form method="post" action="/sign-out" class="sign-out-form">
                    <button type="submit" class="btn btn-link">Sign out</button>
                </form>
            </div>"""
        return f"""
    <aside class="sidebar" id="sidebar" aria-label="Sidebar">
        <nav class="sidebar-nav" role="navigation" aria-label="Main navigation">
            <div class="sidebar-header">
                <span class="sidebar-title">MALI Ed</span>
            </div>
            <div class="sidebar-items">
                {links}
            </div>{footer}
        </nav>
    </aside>"""

    def _link(self, href: str, label: str, *, active: bool) -> str:
        attrs = self.attributes(
            href=href,
            class_=self.classes("nav-item", active=active),
            aria_current="page" if active else None,
        )
        return f"<a {attrs}>{self.escape(label)}</a>"
