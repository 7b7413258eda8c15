"""Sprint0 template rendering.

Jinja2-based rendering of assembled reports. Output is deterministic apart
from the generation timestamp, which the JSON form can omit.
"""

from sprint0.templates.renderer import ReportRenderer, format_datetime

__all__ = ["ReportRenderer", "format_datetime"]
