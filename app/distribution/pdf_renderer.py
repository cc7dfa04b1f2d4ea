"""PDF rendering of distribution reports via WeasyPrint.

The report text is laid out as preformatted content on pages of the
configured size, so long reports simply flow onto further pages.
"""
from __future__ import annotations

import html
import logging
from string import Template

from app.distribution.exceptions import RenderingError

logger = logging.getLogger(__name__)

_PAGE_TEMPLATE = Template(
    """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
@page { size: $page_size; margin: 72px; }
body { font-family: $font_family; font-size: ${font_size}pt; }
pre { font-family: inherit; white-space: pre-wrap; margin: 0; }
</style>
</head>
<body><pre>$content</pre></body>
</html>
"""
)


class PdfRenderer:
    """Render report text into a single PDF document."""

    def __init__(
        self,
        page_size: str = "Letter",
        font_family: str = "Helvetica",
        font_size: int = 12,
    ) -> None:
        self.page_size = page_size
        self.font_family = font_family
        self.font_size = font_size

    def to_html(self, text: str) -> str:
        return _PAGE_TEMPLATE.substitute(
            page_size=self.page_size,
            font_family=self.font_family,
            font_size=self.font_size,
            content=html.escape(text),
        )

    def render(self, text: str) -> bytes:
        """Return the PDF bytes for *text*; failures raise ``RenderingError``."""
        html_content = self.to_html(text)
        try:
            import weasyprint  # lazy import, needs system Pango libraries

            return weasyprint.HTML(string=html_content).write_pdf()
        except Exception as exc:
            logger.error("PDF rendering failed: %s", exc)
            raise RenderingError(f"PDF rendering failed: {exc}") from exc
