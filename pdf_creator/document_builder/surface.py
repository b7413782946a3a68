"""Drawing Surface Module

A paintable, paginated canvas built on ReportLab.

Layout code works in top-left coordinates (y grows downward) and moves a
mutable cursor (``x``, ``y``) over the current page. Every paint call is
recorded on its page as a ``DrawOp`` together with the graphics state in force
at the time; pages stay buffered so that any of them can be revisited (for
page numbering) until ``export()`` replays all ops onto a ReportLab canvas.
"""
import base64
import io
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas as pdfcanvas

from ..components import ImageOptions, PageMargins, TextOptions
from ..config import BULLET_CHAR, LINE_HEIGHT_FACTOR
from ..document_options import DocumentOptions
from ..exceptions import DrawSurfaceError
from ..logger import get_logger
from . import coordinate_utils
from .font_manager import FontManager

logger = get_logger(__name__)

LINE_JOIN_CODES = {"miter": 0, "round": 1, "bevel": 2}
LINE_CAP_CODES = {"butt": 0, "round": 1, "square": 2}
DEFAULT_ELLIPSIS = "…"


@dataclass
class GraphicsState:
    """Paint state captured with every recorded op."""

    font_name: str = "Helvetica"
    font_size: float = 11
    fill_color: str = "#000000"
    line_width: float = 1.0
    line_join: str = "miter"
    line_cap: str = "butt"
    dash: Optional[Tuple[float, float]] = None
    stroke_opacity: float = 1.0
    fill_opacity: float = 1.0


@dataclass
class DrawOp:
    """One recorded paint call, in layout (top-left) coordinates."""

    kind: str
    x: float
    y: float
    width: float
    height: float
    state: GraphicsState
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Page:
    width: float
    height: float
    margins: PageMargins
    ops: List[DrawOp] = field(default_factory=list)


@dataclass(frozen=True)
class PageRange:
    start: int
    count: int


class ReportLabSurface:
    """Buffered drawing surface producing PDF bytes through ReportLab.

    Attributes:
        x, y: Current draw cursor on the current page (points, top-left origin)
        pages: Buffered pages with their recorded ops
    """

    def __init__(self, options: Optional[DocumentOptions] = None, font_manager: Optional[FontManager] = None):
        """
        Initialize the surface and open the first page.

        Args:
            options: Page size, margins, default font size and metadata
            font_manager: Font registry (created on demand)
        """
        self.options = options or DocumentOptions()
        self.font_manager = font_manager or FontManager()
        self.pages: List[Page] = []
        self.x = 0.0
        self.y = 0.0
        self._current = 0
        self._state = GraphicsState(
            font_name=self.font_manager.get_font_name(),
            font_size=self.options.font_size,
        )
        self._image_data: Dict[str, bytes] = {}
        self.add_page()

    # Page geometry

    @property
    def page(self) -> Page:
        return self.pages[self._current]

    @property
    def page_width(self) -> float:
        return self.page.width

    @property
    def page_height(self) -> float:
        return self.page.height

    @property
    def margins(self) -> PageMargins:
        return self.page.margins

    @property
    def state(self) -> GraphicsState:
        return self._state

    def add_page(self) -> Page:
        """Append a new page, make it current and move the cursor to its content origin."""
        width, height = self.options.page_size
        margins = self.options.page_margins
        self.pages.append(Page(width=width, height=height, margins=margins))
        self._current = len(self.pages) - 1
        self.x = margins.left
        self.y = margins.top
        logger.debug(f"Added page {len(self.pages)}")
        return self.page

    def buffered_page_range(self) -> PageRange:
        return PageRange(start=0, count=len(self.pages))

    def switch_to_page(self, index: int) -> Page:
        if not 0 <= index < len(self.pages):
            raise DrawSurfaceError(f"Page index {index} out of range (0-{len(self.pages) - 1})")
        self._current = index
        return self.page

    # Graphics state

    def set_font(self, font_name: str):
        try:
            pdfmetrics.getFont(font_name)
        except KeyError:
            raise DrawSurfaceError(f"Font is not registered: {font_name}")
        self._state.font_name = font_name
        return self

    def set_font_size(self, font_size: float):
        self._state.font_size = font_size
        return self

    def set_fill_color(self, color: str):
        self._check_color(color)
        self._state.fill_color = color
        return self

    def set_line_width(self, width: float):
        self._state.line_width = width
        return self

    def set_line_join(self, join: str):
        if join not in LINE_JOIN_CODES:
            raise DrawSurfaceError(f"Unknown line join: {join}")
        self._state.line_join = join
        return self

    def set_line_cap(self, cap: str):
        if cap not in LINE_CAP_CODES:
            raise DrawSurfaceError(f"Unknown line cap: {cap}")
        self._state.line_cap = cap
        return self

    def dash(self, length: float, space: float):
        self._state.dash = (length, space)
        return self

    def undash(self):
        self._state.dash = None
        return self

    def set_stroke_opacity(self, opacity: float):
        self._state.stroke_opacity = opacity
        return self

    def set_fill_opacity(self, opacity: float):
        self._state.fill_opacity = opacity
        return self

    # Text measurement

    def line_height(self, line_gap: Optional[float] = None) -> float:
        """Height of one text line with the current font size."""
        return self._state.font_size * LINE_HEIGHT_FACTOR + (line_gap or 0)

    def measure_text_height(self, text, width: Optional[float] = None, line_gap: Optional[float] = None) -> float:
        """
        Height the text takes when wrapped to ``width`` with the current font.

        Args:
            text: Text to measure (converted with str())
            width: Wrap width; defaults to the space right of the cursor
            line_gap: Extra space added to every line

        Returns:
            Height in points (0 for empty text)
        """
        text = str(text)
        if not text:
            return 0.0
        if width is None:
            width = self._default_width(self.x)
        return len(self._wrap(text, width)) * self.line_height(line_gap)

    # Painting

    def paint_text(self, x: float, y: float, text, options: Optional[TextOptions] = None) -> float:
        """
        Paint wrapped text with its top-left corner at (x, y).

        The cursor moves below the painted text. With ``options.height`` set,
        lines that do not fit are dropped; with ``options.ellipsis`` the last
        kept line ends with an ellipsis. Without a height, lines that would
        cross the bottom margin continue at the top of a new page.
        "justify" is drawn flush left.

        Returns:
            Painted height in points (summed over pages)
        """
        options = options or TextOptions()
        width = options.width if options.width is not None else self._default_width(x)
        line_h = self.line_height(options.line_gap)
        flowing = options.height is None

        lines = self._wrap(str(text), width)
        lines = self._clip_lines(lines, line_h, options, width)

        top = line_top = y
        placed = []
        for line in lines:
            if flowing and self._crosses_bottom(line_top, line_h):
                if placed:
                    self._record("text", x, top, width, line_top - top, lines=placed)
                self.add_page()
                top = line_top = self.margins.top
                placed = []
            placed.append((self._aligned_x(x, width, line, options.align), self._baseline(line_top), line))
            line_top += line_h

        self._record("text", x, top, width, line_top - top, lines=placed)
        self.x = x
        self.y = line_top
        return len(lines) * line_h

    def paint_list(self, x: float, y: float, items: Sequence, options: Optional[TextOptions] = None) -> float:
        """
        Paint a bullet, numbered or lettered list with its top-left corner at (x, y).

        Pages break between lines the same way as for ``paint_text``.

        Returns:
            Painted height in points (summed over pages)
        """
        options = options or TextOptions()
        width = options.width if options.width is not None else self._default_width(x)
        line_h = self.line_height(options.line_gap)
        flowing = options.height is None
        list_type = options.list_type or "bullet"
        bullet_x = x + (options.bullet_indent or 0)
        text_x = bullet_x + (options.text_indent if options.text_indent is not None else self._state.font_size * 1.5)
        text_width = width - (text_x - x)

        max_lines = None
        if not flowing:
            max_lines = int(options.height // line_h)

        top = line_top = y
        placed = []
        line_count = 0
        for index, item in enumerate(items):
            item_lines = self._wrap(str(item), text_width)
            if max_lines is not None and line_count + len(item_lines) > max_lines:
                item_lines = self._clip_lines(item_lines, line_h, replace(options, height=(max_lines - line_count) * line_h), text_width)
                truncated = True
            else:
                truncated = False

            for j, line in enumerate(item_lines):
                if flowing and self._crosses_bottom(line_top, line_h):
                    if placed:
                        self._record("list", x, top, width, line_top - top, lines=placed)
                    self.add_page()
                    top = line_top = self.margins.top
                    placed = []
                baseline = self._baseline(line_top)
                if j == 0:
                    placed.append((bullet_x, baseline, self._list_marker(list_type, index)))
                placed.append((self._aligned_x(text_x, text_width, line, options.align), baseline, line))
                line_top += line_h
                line_count += 1

            if truncated:
                break

        self._record("list", x, top, width, line_top - top, lines=placed)
        self.x = x
        self.y = line_top
        return line_count * line_h

    def paint_image(
        self,
        x: float,
        y: float,
        path: str,
        width: Optional[float] = None,
        height: Optional[float] = None,
        options: Optional[ImageOptions] = None
    ) -> Tuple[float, float]:
        """
        Paint an image file with its top-left corner at (x, y).

        Size rules: ``fit`` box, else explicit width and/or height (a single
        dimension keeps the aspect ratio), else ``scale``, else the intrinsic
        pixel size as points. When painted at the cursor's y, the cursor moves
        below the image.

        Returns:
            Painted (width, height) in points
        """
        options = options or ImageOptions()
        data = self._load_image(path)
        try:
            px_width, px_height = ImageReader(io.BytesIO(data)).getSize()
        except Exception as e:
            raise DrawSurfaceError(f"Cannot read image {path}: {e}")

        draw_x, draw_y = x, y
        if options.fit:
            box_width, box_height = options.fit
            w, h = coordinate_utils.fit_within(px_width, px_height, box_width, box_height)
            if options.align == "center":
                draw_x += (box_width - w) / 2
            elif options.align == "right":
                draw_x += box_width - w
            if options.valign == "center":
                draw_y += (box_height - h) / 2
            elif options.valign == "bottom":
                draw_y += box_height - h
        elif width and height:
            w, h = width, height
        elif width:
            w, h = width, coordinate_utils.height_for_width(px_width, px_height, width)
        elif height:
            w, h = coordinate_utils.width_for_height(px_width, px_height, height), height
        elif options.scale:
            w, h = px_width * options.scale, px_height * options.scale
        else:
            w, h = float(px_width), float(px_height)

        self._record("image", draw_x, draw_y, w, h, path=path)

        if y == self.y:
            self.y += h

        return w, h

    def paint_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        fill_color: Optional[str] = None,
        stroke_color: Optional[str] = None
    ) -> None:
        """Fill and/or stroke a rectangle with the current line style and opacities."""
        if fill_color:
            self._check_color(fill_color)
        if stroke_color:
            self._check_color(stroke_color)
        self._record("rect", x, y, width, height, fill_color=fill_color, stroke_color=stroke_color)

    # Output

    def export(self) -> bytes:
        """Replay every buffered page onto a ReportLab canvas and return the PDF bytes."""
        buffer = io.BytesIO()
        first = self.pages[0]
        pdf = pdfcanvas.Canvas(
            buffer,
            pagesize=(first.width, first.height),
            pageCompression=1 if self.options.compress else 0,
        )
        self._apply_info(pdf)

        for page in self.pages:
            pdf.setPageSize((page.width, page.height))
            for op in page.ops:
                self._replay(pdf, page, op)
            pdf.showPage()

        pdf.save()
        return buffer.getvalue()

    def to_base64(self) -> str:
        return base64.b64encode(self.export()).decode("ascii")

    def save(self, output_path: str) -> str:
        with open(output_path, "wb") as f:
            f.write(self.export())
        return output_path

    def trace(self) -> List[Tuple[int, str, float, float, float, float]]:
        """Geometry of every recorded op as (page, kind, x, y, width, height)."""
        return [
            (index, op.kind, round(op.x, 3), round(op.y, 3), round(op.width, 3), round(op.height, 3))
            for index, page in enumerate(self.pages)
            for op in page.ops
        ]

    # Internals

    def _default_width(self, x: float) -> float:
        return self.page_width - self.margins.right - x

    def _crosses_bottom(self, line_top: float, line_h: float) -> bool:
        # Lines starting at the top margin always stay on their page
        margins = self.margins
        return line_top > margins.top and line_top + line_h > self.page_height - margins.bottom

    def _wrap(self, text: str, width: float) -> List[str]:
        font_name, font_size = self._state.font_name, self._state.font_size
        lines = []
        for paragraph in text.split("\n"):
            split = simpleSplit(paragraph, font_name, font_size, width) if width > 0 else [paragraph]
            lines.extend(split or [""])
        return lines

    def _clip_lines(self, lines: List[str], line_h: float, options: TextOptions, width: float) -> List[str]:
        if options.height is None:
            return lines
        max_lines = max(int(options.height // line_h), 0)
        if len(lines) <= max_lines:
            return lines

        kept = lines[:max_lines]
        if options.ellipsis and kept:
            marker = options.ellipsis if isinstance(options.ellipsis, str) else DEFAULT_ELLIPSIS
            kept[-1] = self._truncate(kept[-1], marker, width)
        return kept

    def _truncate(self, line: str, marker: str, width: float) -> str:
        font_name, font_size = self._state.font_name, self._state.font_size
        while line and pdfmetrics.stringWidth(line + marker, font_name, font_size) > width:
            line = line[:-1]
        return line.rstrip() + marker

    def _aligned_x(self, x: float, width: float, line: str, align: Optional[str]) -> float:
        if align not in ("center", "right"):
            return x
        line_width = pdfmetrics.stringWidth(line, self._state.font_name, self._state.font_size)
        if align == "center":
            return x + (width - line_width) / 2
        return x + width - line_width

    def _baseline(self, line_top: float) -> float:
        font_size = self._state.font_size
        ascent, descent = pdfmetrics.getAscentDescent(self._state.font_name, font_size)
        leading = font_size * LINE_HEIGHT_FACTOR
        return line_top + (leading - (ascent - descent)) / 2 + ascent

    def _list_marker(self, list_type: str, index: int) -> str:
        if list_type == "numbered":
            return f"{index + 1}."
        if list_type == "lettered":
            return chr(ord("a") + index % 26) * (index // 26 + 1) + "."
        return BULLET_CHAR

    def _load_image(self, path: str) -> bytes:
        # Bytes are kept in memory: the backing file may be gone before export()
        if path not in self._image_data:
            try:
                with open(path, "rb") as f:
                    self._image_data[path] = f.read()
            except OSError as e:
                raise DrawSurfaceError(f"Cannot open image {path}: {e}")
        return self._image_data[path]

    def _check_color(self, color: str) -> None:
        try:
            colors.toColor(color)
        except ValueError:
            raise DrawSurfaceError(f"Invalid color: {color!r}")

    def _record(self, kind: str, x: float, y: float, width: float, height: float, **data) -> None:
        self.page.ops.append(DrawOp(kind, x, y, width, height, replace(self._state), data))

    def _replay(self, pdf, page: Page, op: DrawOp) -> None:
        state = op.state
        pdf.saveState()
        try:
            if op.kind in ("text", "list"):
                pdf.setFont(state.font_name, state.font_size)
                pdf.setFillColor(colors.toColor(state.fill_color))
                pdf.setFillAlpha(state.fill_opacity)
                for line_x, baseline, line in op.data["lines"]:
                    if line:
                        pdf.drawString(line_x, coordinate_utils.flip_y_coordinate(baseline, page.height), line)

            elif op.kind == "rect":
                pdf.setLineWidth(state.line_width)
                pdf.setLineJoin(LINE_JOIN_CODES[state.line_join])
                pdf.setLineCap(LINE_CAP_CODES[state.line_cap])
                if state.dash:
                    pdf.setDash(list(state.dash), 0)
                else:
                    pdf.setDash([], 0)
                fill_color, stroke_color = op.data["fill_color"], op.data["stroke_color"]
                if fill_color:
                    pdf.setFillColor(colors.toColor(fill_color))
                    pdf.setFillAlpha(state.fill_opacity)
                if stroke_color:
                    pdf.setStrokeColor(colors.toColor(stroke_color))
                    pdf.setStrokeAlpha(state.stroke_opacity)
                x, y, w, h = coordinate_utils.convert_box_to_pdf(op.x, op.y, op.width, op.height, page.height)
                pdf.rect(x, y, w, h, stroke=1 if stroke_color else 0, fill=1 if fill_color else 0)

            elif op.kind == "image":
                reader = ImageReader(io.BytesIO(self._image_data[op.data["path"]]))
                x, y, w, h = coordinate_utils.convert_box_to_pdf(op.x, op.y, op.width, op.height, page.height)
                pdf.drawImage(reader, x, y, width=w, height=h, mask="auto")
        finally:
            pdf.restoreState()

    def _apply_info(self, pdf) -> None:
        info = self.options.info
        if info.title:
            pdf.setTitle(info.title)
        if info.author:
            pdf.setAuthor(info.author)
        if info.subject:
            pdf.setSubject(info.subject)
        if info.keywords:
            pdf.setKeywords(info.keywords)
        if info.creator:
            pdf.setCreator(info.creator)
        if info.producer:
            pdf.setProducer(info.producer)
