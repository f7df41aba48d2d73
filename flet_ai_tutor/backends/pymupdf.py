"""
PyMuPDF document source - page count, text extraction and page images.
"""

from __future__ import annotations

import base64
import io
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import pymupdf

from ..errors import DocumentError

logger = logging.getLogger(__name__)


class PdfSource:
    """
    Read-only PDF wrapper.

    Can be created from:
    - File path (str or Path)
    - Bytes
    - BytesIO

    Page numbers are 1-based, matching the annotation records.

    Raises:
        TypeError: If the source type is not supported
        DocumentError: If the data is not a readable PDF, or it is encrypted
                       and no valid password was provided
    """

    def __init__(
        self,
        source: Union[str, Path, bytes, io.BytesIO],
        password: Optional[str] = None,
    ):
        try:
            if isinstance(source, (str, Path)):
                self._doc = pymupdf.open(str(source))
            elif isinstance(source, bytes):
                self._doc = pymupdf.open(stream=source, filetype="pdf")
            elif isinstance(source, io.BytesIO):
                self._doc = pymupdf.open(stream=source.read(), filetype="pdf")
            else:
                raise TypeError(f"Unsupported source type: {type(source)}")
        except TypeError:
            raise
        except Exception as exc:
            raise DocumentError(f"Could not open PDF: {exc}") from exc

        if self._doc.needs_pass:
            if password is None or not self._doc.authenticate(password):
                self._doc.close()
                raise DocumentError("Document is encrypted and requires a valid password")

    @property
    def page_count(self) -> int:
        return len(self._doc)

    def _page(self, page_number: int) -> "pymupdf.Page":
        if page_number < 1 or page_number > len(self._doc):
            raise IndexError(f"Page number {page_number} out of range")
        return self._doc[page_number - 1]

    def page_size(self, page_number: int = 1) -> Tuple[float, float]:
        """Get page size (width, height) in points."""
        rect = self._page(page_number).rect
        return (rect.width, rect.height)

    def extract_text(self) -> str:
        """Plain text of every page, used as chat context."""
        return "\n".join(page.get_text() for page in self._doc).strip()

    def render_page(self, page_number: int, scale: float = 1.0) -> str:
        """Rasterise a page to a base64 PNG for `ft.Image(src_base64=...)`."""
        pixmap = self._page(page_number).get_pixmap(matrix=pymupdf.Matrix(scale, scale))
        return base64.b64encode(pixmap.tobytes("png")).decode("ascii")

    def close(self) -> None:
        """Close and release resources."""
        if self._doc:
            self._doc.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def inspect_pdf(data: bytes) -> Tuple[str, int]:
    """Extract (text, page_count) from raw PDF bytes."""
    with PdfSource(data) as pdf:
        text, pages = pdf.extract_text(), pdf.page_count
    logger.debug("Extracted %d characters from %d pages", len(text), pages)
    return text, pages
