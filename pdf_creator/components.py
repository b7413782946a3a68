"""Document Components

Dataclasses describing a document definition: content nodes (text, list,
image, table), their styles and options, and the image metadata that the
image resolver fills in before layout.

Each node class carries a ``kind`` tag, so renderers dispatch on the type
decided when the node was built instead of probing keys at render time.
"""
from dataclasses import dataclass, field, fields
from typing import ClassVar, Iterator, List, Optional, Tuple, Union

from .config import (
    DEFAULT_CELL_STYLE,
    FONT_FILES,
    LIST_MARKERS,
    OVERFLOW_POLICIES,
    WILDCARD,
)
from .exceptions import ConfigurationError

TEXT_ALIGNMENTS = ("left", "center", "right", "justify")
JUSTIFICATIONS = ("top", "center", "bottom")
LINE_JOINS = ("miter", "round", "bevel")
LINE_CAPS = ("butt", "round", "square")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_choice(name: str, value, choices) -> None:
    if value is not None and value not in choices:
        raise ConfigurationError(f"{name} must be one of {', '.join(choices)}, got {value!r}")


@dataclass(frozen=True)
class Margin:
    """Margin around a content node.

    A scalar margin applies the same value to every side and keeps
    ``uniform=True``; the 4-tuple form is ``[left, top, right, bottom]``.
    """

    left: float = 0.0
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    uniform: bool = False

    @classmethod
    def parse(cls, value) -> Optional["Margin"]:
        """Build a margin from a scalar or a 4-item sequence.

        Raises:
            ConfigurationError: If the value has any other shape
        """
        if value is None or isinstance(value, Margin):
            return value

        if _is_number(value):
            return cls(value, value, value, value, uniform=True)

        if isinstance(value, (list, tuple)):
            if len(value) != 4 or not all(_is_number(v) for v in value):
                raise ConfigurationError(
                    f"margin must be a number or [left, top, right, bottom], got {list(value)!r}"
                )
            left, top, right, bottom = value
            return cls(left, top, right, bottom)

        raise ConfigurationError(f"margin must be a number or a list of 4 numbers, got {value!r}")


@dataclass(frozen=True)
class PageMargins:
    """Page margins in points."""

    top: float = 0.0
    left: float = 0.0
    bottom: float = 0.0
    right: float = 0.0

    @classmethod
    def uniform(cls, value: float) -> "PageMargins":
        return cls(top=value, left=value, bottom=value, right=value)


@dataclass
class NodeStyle:
    """Paint state applied before a node is drawn. Unset fields use the defaults."""

    text_color: Optional[str] = None
    font_size: Optional[float] = None
    font_type: Optional[str] = None

    def __post_init__(self):
        _check_choice("fontType", self.font_type, tuple(FONT_FILES))
        if self.font_size is not None and self.font_size <= 0:
            raise ConfigurationError(f"fontSize must be positive, got {self.font_size}")


@dataclass
class TextOptions:
    """Text layout options passed to the drawing surface.

    Every field defaults to None so that options can be layered: a table
    cell's own options are laid over the options the table computes for it.
    """

    width: Optional[float] = None
    height: Optional[float] = None
    align: Optional[str] = None
    ellipsis: Optional[Union[bool, str]] = None
    line_gap: Optional[float] = None
    list_type: Optional[str] = None
    bullet_indent: Optional[float] = None
    text_indent: Optional[float] = None

    def __post_init__(self):
        _check_choice("align", self.align, TEXT_ALIGNMENTS)
        _check_choice("listType", self.list_type, LIST_MARKERS)

    def merged_over(self, base: "TextOptions") -> "TextOptions":
        """Return options where this object's set fields override ``base``."""
        values = {}
        for f in fields(self):
            own = getattr(self, f.name)
            values[f.name] = own if own is not None else getattr(base, f.name)
        return TextOptions(**values)

    def without_box(self) -> "TextOptions":
        """Copy without width/height (a table cell fixes those itself)."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(width=None, height=None)
        return TextOptions(**values)


@dataclass
class ImageOptions:
    """Image placement options (scale, fit box and alignment inside the fit box)."""

    scale: Optional[float] = None
    fit: Optional[Tuple[float, float]] = None
    align: Optional[str] = None
    valign: Optional[str] = None

    def __post_init__(self):
        _check_choice("align", self.align, ("left", "center", "right"))
        _check_choice("valign", self.valign, ("top", "center", "bottom"))
        if self.fit is not None:
            if len(self.fit) != 2 or not all(_is_number(v) for v in self.fit):
                raise ConfigurationError(f"fit must be [width, height], got {self.fit!r}")
            self.fit = (float(self.fit[0]), float(self.fit[1]))


@dataclass
class ImageProperties:
    """Metadata of a downloaded image: local path and intrinsic pixel size."""

    path: str
    width: int
    height: int
    orientation: Optional[int] = None
    type: Optional[str] = None


@dataclass
class ImageRef:
    """Reference to a remote image. ``properties`` is injected by the resolver."""

    url: str
    options: ImageOptions = field(default_factory=ImageOptions)
    properties: Optional[ImageProperties] = None


@dataclass
class ContentNode:
    """Base class of every renderable unit of the document tree."""

    kind: ClassVar[str] = ""

    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    margin: Optional[Margin] = None
    style: NodeStyle = field(default_factory=NodeStyle)


@dataclass
class TextNode(ContentNode):
    kind: ClassVar[str] = "text"

    text: str = ""
    options: TextOptions = field(default_factory=TextOptions)


@dataclass
class ListNode(ContentNode):
    kind: ClassVar[str] = "list"

    items: List[str] = field(default_factory=list)
    options: TextOptions = field(default_factory=TextOptions)


@dataclass
class ImageNode(ContentNode):
    kind: ClassVar[str] = "image"

    image: Optional[ImageRef] = None


@dataclass
class Dash:
    length: float
    space: float


@dataclass
class CellStyle:
    """Table cell styling. Unset fields fall back to the table's base style,
    then to ``DEFAULT_CELL_STYLE``."""

    justify: Optional[str] = None
    align: Optional[str] = None
    line_join: Optional[str] = None
    line_cap: Optional[str] = None
    dash: Optional[Dash] = None
    line_width: Optional[float] = None
    stroke_opacity: Optional[float] = None
    stroke_color: Optional[str] = None
    fill_opacity: Optional[float] = None
    fill_color: Optional[str] = None
    cell_margin: Optional[float] = None

    def __post_init__(self):
        _check_choice("justify", self.justify, JUSTIFICATIONS)
        _check_choice("align", self.align, TEXT_ALIGNMENTS)
        _check_choice("lineJoin", self.line_join, LINE_JOINS)
        _check_choice("lineCap", self.line_cap, LINE_CAPS)

    def merged_over(self, base: "CellStyle") -> "CellStyle":
        values = {}
        for f in fields(self):
            own = getattr(self, f.name)
            values[f.name] = own if own is not None else getattr(base, f.name)
        return CellStyle(**values)

    def resolved(self) -> "CellStyle":
        """Fill every unset field from the default cell style."""
        return self.merged_over(CellStyle(**DEFAULT_CELL_STYLE))


CellContent = Union[TextNode, ListNode, ImageNode]


@dataclass
class TableCell:
    """A table cell: text, list or image content plus its cell styling."""

    content: CellContent
    style: CellStyle = field(default_factory=CellStyle)

    @classmethod
    def from_value(cls, value) -> "TableCell":
        """Wrap a bare scalar as a text cell."""
        if isinstance(value, TableCell):
            return value
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            return cls(content=TextNode(text=str(value)))
        raise ConfigurationError(f"table cell must be text, a number or cell options, got {value!r}")


Row = List[TableCell]


@dataclass
class TableOptions:
    """Table-wide options. ``cell_style`` is the base style of every cell."""

    max_width: Optional[float] = None
    margins: Optional[PageMargins] = None
    is_ellipsis: bool = False
    cell_margin: Optional[float] = None
    overflow: str = "fallback"
    cell_style: CellStyle = field(default_factory=CellStyle)

    def __post_init__(self):
        _check_choice("overflow", self.overflow, OVERFLOW_POLICIES)


@dataclass
class Table:
    widths: List[Union[float, str]] = field(default_factory=list)
    height: Optional[float] = None
    options: TableOptions = field(default_factory=TableOptions)
    header: List[Row] = field(default_factory=list)
    body: List[Row] = field(default_factory=list)
    footer: List[Row] = field(default_factory=list)

    def __post_init__(self):
        for width in self.widths:
            if width != WILDCARD and not _is_number(width):
                raise ConfigurationError(f"table widths must be numbers or '{WILDCARD}', got {width!r}")
        self.header = [[TableCell.from_value(cell) for cell in row] for row in self.header]
        self.body = [[TableCell.from_value(cell) for cell in row] for row in self.body]
        self.footer = [[TableCell.from_value(cell) for cell in row] for row in self.footer]

    def row_groups(self) -> Iterator[Tuple[str, List[Row]]]:
        yield "header", self.header
        yield "body", self.body
        yield "footer", self.footer


@dataclass
class TableNode(ContentNode):
    kind: ClassVar[str] = "table"

    table: Optional[Table] = None


@dataclass
class PageNumberOptions:
    """Page number stamping configuration ("seperator" spelling kept from the definition format)."""

    type: str = "basic"
    separator: str = "-"
    align: str = "right"
    location: str = "bottom"
    style: NodeStyle = field(default_factory=NodeStyle)
    options: TextOptions = field(default_factory=TextOptions)

    def __post_init__(self):
        _check_choice("type", self.type, ("basic", "seperator"))
        _check_choice("align", self.align, ("left", "center", "right"))
        _check_choice("location", self.location, ("top", "bottom"))


@dataclass
class Document:
    content: List[ContentNode] = field(default_factory=list)
    page_number_options: Optional[PageNumberOptions] = None

    def iter_image_refs(self) -> Iterator[ImageRef]:
        """Yield every image reference, including the ones inside table cells."""
        for node in self.content:
            if isinstance(node, ImageNode) and node.image is not None:
                yield node.image
            elif isinstance(node, TableNode) and node.table is not None:
                for _, rows in node.table.row_groups():
                    for row in rows:
                        for cell in row:
                            if isinstance(cell.content, ImageNode) and cell.content.image is not None:
                                yield cell.content.image
