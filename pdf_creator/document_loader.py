"""Document Definition Loader

Builds the component model from a JSON-shaped document definition::

    {
        "documentOptions": {"size": "A4", "margin": 40},
        "pageNumberOptions": {"type": "seperator", "seperator": "/"},
        "content": [
            {"text": "Hello", "fontSize": 14, "margin": [0, 0, 0, 10]},
            {"table": {"widths": [100, "*"], "body": [["a", "b"]]}}
        ]
    }

Keys use the camelCase names of the definition format. Every malformed field
raises DefinitionParsingError naming the offending field.
"""
import json
from typing import Any, Dict, List, Optional, Tuple

from .components import (
    CellStyle,
    ContentNode,
    Dash,
    Document,
    ImageNode,
    ImageOptions,
    ImageRef,
    ListNode,
    Margin,
    NodeStyle,
    PageMargins,
    PageNumberOptions,
    Table,
    TableCell,
    TableNode,
    TableOptions,
    TextNode,
    TextOptions,
)
from .config import MAX_DEFINITION_SIZE_MB
from .document_options import DocumentInfo, DocumentOptions
from .exceptions import ConfigurationError, DefinitionParsingError, InvalidFileError
from .utils import check_file_size_limit, validate_definition_path

NODE_KEYS = ("text", "list", "image", "table")
CELL_KEYS = ("text", "list", "image")

CELL_STYLE_KEYS = {
    "justify": "justify",
    "align": "align",
    "lineJoin": "line_join",
    "lineCap": "line_cap",
    "lineWidth": "line_width",
    "strokeOpacity": "stroke_opacity",
    "strokeColor": "stroke_color",
    "fillOpacity": "fill_opacity",
    "fillColor": "fill_color",
    "cellMargin": "cell_margin",
}

TEXT_OPTION_KEYS = {
    "width": "width",
    "height": "height",
    "align": "align",
    "ellipsis": "ellipsis",
    "lineGap": "line_gap",
    "listType": "list_type",
    "bulletIndent": "bullet_indent",
    "textIndent": "text_indent",
}


def _expect_dict(value, field: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DefinitionParsingError(field, f"expected an object, got {type(value).__name__}")
    return value


def _expect_list(value, field: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DefinitionParsingError(field, f"expected a list, got {type(value).__name__}")
    return value


def _pick(data: Dict[str, Any], keys: Dict[str, str]) -> Dict[str, Any]:
    return {name: data[key] for key, name in keys.items() if key in data}


def _content_key(data: Dict[str, Any], allowed: Tuple[str, ...], field: str) -> str:
    present = [key for key in allowed if key in data]
    if len(present) != 1:
        found = ", ".join(present) if present else "none"
        raise DefinitionParsingError(field, f"expected exactly one of {', '.join(allowed)} (found {found})")
    return present[0]


def load_style(data: Dict[str, Any]) -> NodeStyle:
    return NodeStyle(
        text_color=data.get("textColor"),
        font_size=data.get("fontSize"),
        font_type=data.get("fontType"),
    )


def load_text_options(data, field: str = "options") -> TextOptions:
    return TextOptions(**_pick(_expect_dict(data, field), TEXT_OPTION_KEYS))


def load_page_margins(data, field: str = "margins") -> Optional[PageMargins]:
    if data is None:
        return None
    data = _expect_dict(data, field)
    return PageMargins(
        top=data.get("top", 0),
        left=data.get("left", 0),
        bottom=data.get("bottom", 0),
        right=data.get("right", 0),
    )


def load_image_ref(data, field: str = "image") -> ImageRef:
    data = _expect_dict(data, field)
    if "url" not in data:
        raise DefinitionParsingError(field, "image needs a url")
    options = _expect_dict(data.get("options"), f"{field}.options")
    return ImageRef(
        url=data["url"],
        options=ImageOptions(
            scale=options.get("scale"),
            fit=options.get("fit"),
            align=options.get("align"),
            valign=options.get("valign"),
        ),
    )


def load_cell_style(data: Dict[str, Any], field: str) -> CellStyle:
    values = _pick(data, CELL_STYLE_KEYS)
    if data.get("dash") is not None:
        dash = _expect_dict(data["dash"], f"{field}.dash")
        if "length" not in dash:
            raise DefinitionParsingError(f"{field}.dash", "dash needs a length")
        values["dash"] = Dash(length=dash["length"], space=dash.get("space", dash["length"]))
    return CellStyle(**values)


def _content_node(data: Dict[str, Any], key: str, field: str) -> ContentNode:
    common = dict(
        x=data.get("x"),
        y=data.get("y"),
        width=data.get("width"),
        height=data.get("height"),
        margin=Margin.parse(data.get("margin")),
        style=load_style(data),
    )

    if key == "text":
        return TextNode(text=str(data["text"]), options=load_text_options(data.get("options"), f"{field}.options"), **common)
    if key == "list":
        items = [str(item) for item in _expect_list(data["list"], f"{field}.list")]
        return ListNode(items=items, options=load_text_options(data.get("options"), f"{field}.options"), **common)
    if key == "image":
        return ImageNode(image=load_image_ref(data["image"], f"{field}.image"), **common)
    return TableNode(table=load_table(data["table"], f"{field}.table"), **common)


def load_cell(value, field: str) -> TableCell:
    """Build a table cell from a scalar or a cell options object."""
    if not isinstance(value, dict):
        try:
            return TableCell.from_value(value)
        except ConfigurationError as e:
            raise DefinitionParsingError(field, str(e))

    key = _content_key(value, CELL_KEYS, field)
    try:
        return TableCell(content=_content_node(value, key, field), style=load_cell_style(value, field))
    except DefinitionParsingError:
        raise
    except (ConfigurationError, TypeError, ValueError) as e:
        raise DefinitionParsingError(field, str(e))


def load_table(data, field: str = "table") -> Table:
    data = _expect_dict(data, field)
    options = _expect_dict(data.get("options"), f"{field}.options")

    rows = {}
    for group in ("header", "body", "footer"):
        rows[group] = [
            [load_cell(cell, f"{field}.{group}[{r}][{c}]") for c, cell in enumerate(_expect_list(row, f"{field}.{group}[{r}]"))]
            for r, row in enumerate(_expect_list(data.get(group), f"{field}.{group}"))
        ]

    try:
        table_options = TableOptions(
            max_width=options.get("maxWidth"),
            margins=load_page_margins(options.get("margins"), f"{field}.options.margins"),
            is_ellipsis=bool(options.get("isEllipsis", False)),
            cell_margin=options.get("cellMargin"),
            overflow=options.get("overflow", "fallback"),
            cell_style=load_cell_style(options, f"{field}.options"),
        )
        return Table(
            widths=_expect_list(data.get("widths"), f"{field}.widths"),
            height=data.get("height"),
            options=table_options,
            **rows,
        )
    except DefinitionParsingError:
        raise
    except ConfigurationError as e:
        raise DefinitionParsingError(field, str(e))


def load_node(data, field: str) -> ContentNode:
    """Build one content node; exactly one of text/list/image/table must be present."""
    data = _expect_dict(data, field)
    key = _content_key(data, NODE_KEYS, field)
    try:
        return _content_node(data, key, field)
    except DefinitionParsingError:
        raise
    except (ConfigurationError, TypeError, ValueError) as e:
        raise DefinitionParsingError(field, str(e))


def load_page_number_options(data, field: str = "pageNumberOptions") -> Optional[PageNumberOptions]:
    if data is None:
        return None
    data = _expect_dict(data, field)
    try:
        return PageNumberOptions(
            type=data.get("type", "basic"),
            separator=str(data.get("seperator", data.get("separator", "-"))),
            align=data.get("align", "right"),
            location=data.get("location", "bottom"),
            style=load_style(data),
            options=load_text_options(data.get("options"), f"{field}.options"),
        )
    except ConfigurationError as e:
        raise DefinitionParsingError(field, str(e))


def load_document(data) -> Document:
    """Build a Document from a definition's ``content`` and ``pageNumberOptions``."""
    data = _expect_dict(data, "definition")
    content = [load_node(node, f"content[{i}]") for i, node in enumerate(_expect_list(data.get("content"), "content"))]
    return Document(
        content=content,
        page_number_options=load_page_number_options(data.get("pageNumberOptions")),
    )


def load_document_options(data) -> DocumentOptions:
    data = _expect_dict(data, "documentOptions")
    info = _expect_dict(data.get("info"), "documentOptions.info")
    # Info keys are accepted in either case ("Title" or "title")
    info = {key.lower(): value for key, value in info.items()}

    values = {}
    for key, name in (("size", "size"), ("layout", "layout"), ("margin", "margin"),
                      ("fontSize", "font_size"), ("compress", "compress")):
        if key in data:
            values[name] = data[key]

    try:
        return DocumentOptions(
            margins=load_page_margins(data.get("margins"), "documentOptions.margins"),
            info=DocumentInfo(**{key: info.get(key) for key in
                                 ("title", "author", "subject", "keywords", "creator", "producer")}),
            **values,
        )
    except DefinitionParsingError:
        raise
    except (ConfigurationError, TypeError) as e:
        raise DefinitionParsingError("documentOptions", str(e))


def load_definition(definition) -> Tuple[DocumentOptions, Document]:
    """Split a full definition into its document options and document."""
    definition = _expect_dict(definition, "definition")
    return load_document_options(definition.get("documentOptions")), load_document(definition)


def load_definition_file(definition_path: str) -> Tuple[DocumentOptions, Document]:
    """
    Read and load a JSON definition file.

    Raises:
        InvalidFileError: If the file is missing, not .json or not valid JSON
        FileSizeLimitExceededError: If the file is larger than MAX_DEFINITION_SIZE_MB
        DefinitionParsingError: If the definition is malformed
    """
    validate_definition_path(definition_path)
    check_file_size_limit(definition_path, MAX_DEFINITION_SIZE_MB)

    try:
        with open(definition_path, "r", encoding="utf-8") as f:
            definition = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidFileError(f"Definition is not valid JSON: {e}")

    return load_definition(definition)
