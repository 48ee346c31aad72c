import io
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from PIL import Image, UnidentifiedImageError
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

from .. import config
from ..diagnosis.schema import DiagnosisRecord
from ..errors import RenderError

logger = logging.getLogger(__name__)

PAGE_W, PAGE_H = A4
DEFAULT_FONT = "Helvetica"
REPORT_FONT = "AgrobaseReport"

TITLE = "Agrobase - Diagnosis Report"
IMAGE_BOX = (15, 40, 60, 60)  # x, y, w, h in mm from the top-left
IMAGE_PLACEHOLDER = "Image could not be loaded."
LINE_PITCH = 7
DETAILS_WIDTH = 95  # x=105mm to the right margin at 200mm
BULLET_WIDTH = 90
CONTACT_WIDTH = 175
EFFECTS_TOP = 75
TREATMENTS_TOP = 100


def report_filename(disease_name: str) -> str:
    slug = re.sub(r"\s+", "-", disease_name.strip())
    return f"agrobase-report-{slug}.pdf"


@dataclass(frozen=True)
class DiagnosisReport:
    content: bytes
    filename: str
    pages: Tuple[Tuple[str, ...], ...]
    image_embedded: bool
    generated_at: datetime

    mimetype = "application/pdf"

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def text(self) -> str:
        return "\n".join("\n".join(p) for p in self.pages)


class _Writer:
    """reportlab canvas in mm from the top-left, recording the text of each page."""

    def __init__(self, buf: io.BytesIO, title: str, font: str = DEFAULT_FONT):
        self.c = canvas.Canvas(buf, pagesize=A4, invariant=1)
        self.c.setTitle(title)
        self.c.setAuthor("Agrobase")
        self.font = font
        self.pages: List[List[str]] = [[]]

    def text(self, x: float, y: float, s: str, size: float = 12, align: str = "left") -> None:
        self.c.setFont(self.font, size)
        px, py = x * mm, PAGE_H - y * mm
        if align == "center":
            self.c.drawCentredString(px, py, s)
        else:
            self.c.drawString(px, py, s)
        self.pages[-1].append(s)

    def wrapped(self, x: float, y: float, s: str, width: float, size: float = 12) -> float:
        """Draw `s` wrapped to `width` mm; returns the y of the line after it."""
        lines = simpleSplit(s, self.font, size, width * mm) or [""]
        for line in lines:
            self.text(x, y, line, size=size)
            y += LINE_PITCH
        return y

    def rule(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self.c.line(x1 * mm, PAGE_H - y1 * mm, x2 * mm, PAGE_H - y2 * mm)

    def image(self, reader: ImageReader, x: float, y: float, w: float, h: float) -> None:
        self.c.drawImage(
            reader, x * mm, PAGE_H - (y + h) * mm, width=w * mm, height=h * mm,
            preserveAspectRatio=True, anchor="c", mask="auto",
        )

    def new_page(self) -> None:
        self.c.showPage()
        self.pages.append([])

    def finish(self) -> Tuple[Tuple[str, ...], ...]:
        self.c.showPage()
        self.c.save()
        return tuple(tuple(p) for p in self.pages)


def _load_image(data: bytes) -> ImageReader:
    try:
        with Image.open(io.BytesIO(data)) as probe:
            probe.verify()
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as e:
        raise RenderError(f"Image could not be decoded: {e}") from e
    if img.mode not in ("RGB", "RGBA", "L"):
        img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
    return ImageReader(img)


_registered: Dict[str, str] = {}


def register_font(path: str) -> str:
    """Register a TTF file with reportlab once and return its font name."""
    if path not in _registered:
        name = f"{REPORT_FONT}{len(_registered)}"
        try:
            pdfmetrics.registerFont(TTFont(name, path))
        except (TTFError, OSError) as e:
            raise ValueError(f"Report font {path!r} could not be loaded: {e}") from e
        logger.info("report font %s registered from %s", name, path)
        _registered[path] = name
    return _registered[path]


class ReportGenerator:
    """
    Deterministic two-page layout: summary page, plus a contact page when the
    record carries veterinary info. No I/O; safe to share between threads.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        font_path: Optional[str] = config.REPORT_FONT,
    ):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.font = register_font(font_path) if font_path else DEFAULT_FONT

    def render(self, record: DiagnosisRecord, original_image: Optional[bytes]) -> DiagnosisReport:
        generated_at = self._clock()
        buf = io.BytesIO()
        w = _Writer(buf, TITLE, self.font)

        w.text(105, 20, TITLE, size=22, align="center")
        w.text(105, 28, f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M')} UTC", align="center")

        embedded = self._draw_image(w, original_image)
        self._draw_details(w, record)

        if record.veterinary_info is not None:
            w.new_page()
            self._draw_contact(w, record)

        pages = w.finish()
        return DiagnosisReport(
            content=buf.getvalue(),
            filename=report_filename(record.disease_name),
            pages=pages,
            image_embedded=embedded,
            generated_at=generated_at,
        )

    def _draw_image(self, w: _Writer, data: Optional[bytes]) -> bool:
        x, y, bw, bh = IMAGE_BOX
        try:
            if not data:
                raise RenderError("No image supplied")
            w.image(_load_image(data), x, y, bw, bh)
            return True
        except RenderError as e:
            logger.warning("report image degraded to placeholder: %s", e)
            w.text(x + bw / 2, y + bh / 2, IMAGE_PLACEHOLDER, align="center")
            return False

    def _draw_details(self, w: _Writer, record: DiagnosisRecord) -> None:
        w.text(105, 45, "Diagnosis Details", size=16)
        w.rule(105, 47, 200, 47)
        y = w.wrapped(105, 55, f"Disease Name: {record.disease_name}", DETAILS_WIDTH)
        y = w.wrapped(105, max(62, y), f"Confidence: {record.confidence.value}", DETAILS_WIDTH)

        top = max(EFFECTS_TOP, y + 6)
        w.text(105, top, "Effects / Symptoms:", size=14)
        y = top + LINE_PITCH
        for effect in record.effects:
            y = w.wrapped(110, y, f"- {effect}", BULLET_WIDTH)

        # two effects end exactly at the fixed header position
        top = max(TREATMENTS_TOP, y + 4)
        w.text(105, top, "Suggested Treatments:", size=14)
        y = top + LINE_PITCH
        for med in record.medicines:
            y = w.wrapped(110, y, f"- {med}", BULLET_WIDTH)

    def _draw_contact(self, w: _Writer, record: DiagnosisRecord) -> None:
        vet = record.veterinary_info
        w.text(105, 20, "Professional Contact Information", size=16, align="center")
        w.rule(15, 25, 195, 25)
        w.text(15, 35, "For professional consultation, please contact:")
        y = w.wrapped(20, 45, f"Name: {vet.name}", CONTACT_WIDTH)
        y = w.wrapped(20, y, f"Phone: {vet.phone}", CONTACT_WIDTH)
        w.wrapped(20, y, f"Address: {vet.address}", CONTACT_WIDTH)


def render(record: DiagnosisRecord, original_image: Optional[bytes]) -> DiagnosisReport:
    return ReportGenerator().render(record, original_image)
