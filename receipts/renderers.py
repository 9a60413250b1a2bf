import logging

logger = logging.getLogger(__name__)

PAGE_CSS = "@page {{ size: {size} {orientation}; }}"


def render_pdf(html: str, page_size: str = "A4", orientation: str = "portrait") -> bytes:
    """Render an HTML document to PDF bytes with WeasyPrint."""
    try:
        # Lazy import to avoid startup errors on hosts without Pango/Cairo
        from weasyprint import CSS, HTML
    except (ImportError, OSError) as e:
        logger.error("WeasyPrint not available: %s. Install its system libraries for PDF generation.", e)
        raise

    page = CSS(string=PAGE_CSS.format(size=page_size, orientation=orientation))
    return HTML(string=html).write_pdf(stylesheets=[page])
