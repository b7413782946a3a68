"""PDF Creator - Main Application

Gradio application for rendering JSON document definitions into PDF files.
"""
import os
import tempfile

import gradio as gr
from dotenv import load_dotenv

# Load environment variables (PDF_CREATOR_* settings)
load_dotenv()

from pdf_creator import RenderOptions, RenderPipeline
from pdf_creator.exceptions import ConfigurationError
from pdf_creator.logger import get_logger

logger = get_logger(__name__)

PAGE_SIZES = ["LETTER", "A4", "A3", "A5", "LEGAL"]


def render_definition(
    definition_file,
    definition_text: str,
    page_size: str,
    layout: str,
    override_margin: bool,
    margin: float,
    page_numbers: str,
    page_number_separator: str,
    progress=gr.Progress()
) -> tuple:
    """
    Render an uploaded (or pasted) JSON definition to PDF.

    Args:
        definition_file: Uploaded .json file path (takes precedence over the text box)
        definition_text: JSON definition pasted into the text box
        page_size: Page size override ("definition" keeps the file's value)
        layout: Layout override ("definition", "portrait" or "landscape")
        override_margin: If True, replace the definition's margins with ``margin``
        margin: Uniform page margin in points
        page_numbers: "keep", "none", "basic" or "seperator"
        page_number_separator: Separator for "seperator" page numbers
        progress: Gradio progress tracker

    Returns:
        Tuple of (output PDF path or None, status message)
    """
    if definition_file is None and not (definition_text or "").strip():
        raise gr.Error("Please upload a JSON definition or paste one into the text box")

    definition_path = definition_file
    if definition_path is None:
        fd, definition_path = tempfile.mkstemp(prefix="definition-", suffix=".json")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(definition_text)

    try:
        options = RenderOptions(
            definition_path=definition_path,
            page_size=None if page_size == "definition" else page_size,
            layout=None if layout == "definition" else layout,
            margin=margin if override_margin else None,
            page_numbers=page_numbers,
            page_number_separator=page_number_separator or "/",
        )
    except ConfigurationError as e:
        raise gr.Error(str(e))

    pipeline = RenderPipeline(progress_callback=lambda p, d: progress(p, desc=d))
    result = pipeline.process(options)

    if definition_file is None:
        os.remove(definition_path)

    if result.is_failed:
        logger.error(f"Render failed: {result.error}")
        raise gr.Error(result.status_message)

    return result.to_gradio_outputs()


# Create Gradio interface
with gr.Blocks(title="PDF Creator") as app:
    gr.Markdown("# 📄 PDF Creator")

    gr.Markdown("""
    Render declarative document definitions (text, lists, images, tables, page numbers) into PDF.
    """)

    with gr.Row():
        with gr.Column():
            gr.Markdown("## Page Setup")

            page_size = gr.Dropdown(
                choices=["definition"] + PAGE_SIZES,
                value="definition",
                label="Page Size",
                info="'definition' keeps the size from the JSON file"
            )

            layout = gr.Radio(
                choices=["definition", "portrait", "landscape"],
                value="definition",
                label="Layout"
            )

            override_margin = gr.Checkbox(
                label="Override page margin",
                value=False
            )

            margin = gr.Slider(
                minimum=0,
                maximum=144,
                value=72,
                step=1,
                label="Page margin (points)",
                interactive=False
            )

            gr.Markdown("---")
            gr.Markdown("### Page Numbers")

            page_numbers = gr.Radio(
                choices=[
                    ("From definition", "keep"),
                    ("None", "none"),
                    ("Number only (3)", "basic"),
                    ("With total (3/10)", "seperator"),
                ],
                value="keep",
                label="Page numbering"
            )

            page_number_separator = gr.Textbox(
                value="/",
                label="Separator",
                max_lines=1
            )

        with gr.Column():
            gr.Markdown("## Definition")

            definition_file = gr.File(
                label="Upload JSON Definition",
                file_types=[".json"],
                type="filepath"
            )

            definition_text = gr.Code(
                language="json",
                label="...or paste a definition",
                value='{\n  "content": [\n    {"text": "Hello", "x": 50, "y": 50}\n  ]\n}'
            )

            render_btn = gr.Button(
                "🖨️ Create PDF",
                variant="primary",
                size="lg"
            )

            status = gr.Textbox(
                label="Status",
                interactive=False
            )

            output_file = gr.File(
                label="📥 Download PDF",
                type="filepath"
            )

    # Grey out the margin slider unless the override is enabled
    override_margin.change(
        fn=lambda enabled: gr.update(interactive=enabled),
        inputs=[override_margin],
        outputs=[margin]
    )

    render_btn.click(
        fn=render_definition,
        inputs=[definition_file, definition_text, page_size, layout, override_margin, margin,
                page_numbers, page_number_separator],
        outputs=[output_file, status]
    )


if __name__ == "__main__":
    app.launch()
