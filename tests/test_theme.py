from partnership import theme


def test_status_css_has_a_rule_per_status_and_priority():
    css = theme.status_css()
    for status, color in theme.STATUS_COLORS.items():
        assert f".pd-status-{status} {{ background:{color}; }}" in css
    for priority in theme.PRIORITY_COLORS:
        assert f".pd-priority-{priority}" in css


def test_column_header_html():
    html = theme.column_header_html("in-progress", 3)
    assert "In Progress" in html
    assert "(3)" in html
    assert theme.STATUS_COLORS["in-progress"] in html


def test_column_header_unknown_status():
    html = theme.column_header_html("on-hold", 0)
    assert "on-hold" in html
    assert "#6b7280" in html
