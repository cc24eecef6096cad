"""
Unit tests for journal templates.
"""

from datetime import date

from jn.template import render_template


def test_no_template_is_empty():
    assert render_template(None) == ""


def test_date_placeholder():
    out = render_template("# {{DATE}}\n\n{{DATE}}", today=date(2026, 3, 1))
    assert out == "# 2026-03-01\n\n2026-03-01"


def test_plain_template_unchanged():
    assert render_template("notes:\n") == "notes:\n"
