# -*- coding: utf-8 -*-
"""Initial content for new journals."""
from __future__ import annotations

from datetime import date
from typing import Optional

DATE_PLACEHOLDER = "{{DATE}}"


def render_template(template: Optional[str], today: Optional[date] = None) -> str:
    """Fill the placeholders of *template*; no template means empty content."""
    if template is None:
        return ""
    today = today or date.today()
    return template.replace(DATE_PLACEHOLDER, today.isoformat())
