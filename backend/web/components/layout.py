"""
Layout Component for MALI Ed

Main layout wrapper that combines navigation and page content into a
complete HTML document.
"""

from typing import Optional

from backend.identity_access.domain import AuthUser
from .base import Component
from .navigation import Navigation


class Layout(Component):
    """Main layout component that assembles the complete page"""

    def __init__(
        self,
        title: str,
        content: str,
        user: Optional[AuthUser] = None,
        show_nav: bool = True,
        current_path: str = "/",
        body_class: str = "",
    ):
        """
        Args:
            title: Page title (will be escaped)
            content: Main content HTML (pre-rendered components)
            user: Signed-in user (optional)
            show_nav: Whether to render the sidebar
            current_path: Current URL path for active navigation highlighting
            body_class: Extra CSS class on <body> (e.g. dark home page)
        """
        self.title = title
        self.content = content
        self.user = user
        self.show_nav = show_nav
        self.current_path = current_path
        self.body_class = body_class

    def render(self) -> str:
        nav_html = Navigation(self.user, self.current_path).render() if self.show_nav else ""
        body_attrs = self.attributes(class_=self.body_class or None)
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{self.escape(self.title)} - MALI Ed</title>
    <link rel="stylesheet" href="/static/css/app.css?v=1">
</head>
<body{" " + body_attrs if body_attrs else ""}>
    {nav_html}
    <main id="main-content" class="main-content" role="main">
        {self.content}
    </main>
</body>
</html>"""
