"""
Component helpers: attribute rendering, conditional classes and escaping.
"""
from __future__ import annotations

from backend.web.components import ClassListPage, Component


def test_attributes_map_names_and_drop_false_values():
    html = Component.attributes(class_="logo", data_size="lg", hidden=True, disabled=False, title=None)
    assert html == 'class="logo" data-size="lg" hidden'


def test_attributes_escape_values():
    assert Component.attributes(alt='"><script>') == 'alt="&quot;&gt;&lt;script&gt;"'


def test_classes_appends_enabled_conditionals():
    assert Component.classes("nav-item", active=True, disabled=False) == "nav-item active"


def test_escape_renders_none_as_empty():
    assert Component.escape(None) == ""


def test_class_list_keeps_class_helper_available():
    page = ClassListPage([{"id": "c-1", "name": "7A", "calendar_year": 2026, "is_primary": True}])
    assert page.classes("row", primary=True) == "row primary"
    assert "7A" in page.render()
