"""
Block processing tests

Tests the line automaton of one cell and the conversion of whole notebooks
into pages.
"""

from pathlib import Path

import pytest

from nbdeck.lib.automaton import (
    BlockProcessor,
    UninitializedPageError,
    UnterminatedCommandRegionError,
    commandRegions_strip,
    line_classify,
)
from nbdeck.lib.converter import DocumentConverter, RelocationError, locations_relativize
from nbdeck.models.notebook import Cell, Notebook
from nbdeck.models.pages import CommandSequenceState, PageState


def process(source, cell_type="markdown", outputs=None, state=None):
    """Run one cell through a BlockProcessor, return the pages"""
    cell = Cell(cell_type=cell_type, source=source, outputs=outputs)
    state = state if state is not None else PageState()
    return BlockProcessor(cell, state).process().pages


def notebook(*sources, path="nb/talk.ipynb"):
    """Notebook of markdown cells"""
    cells = [Cell(cell_type="markdown", source=source) for source in sources]
    return Notebook(cells=cells, path=Path(path))


class TestLineClassification:
    """Test the command region states of single lines"""

    def test_single_line_region(self):
        state, text = line_classify(
            "<!--! new; -->\n", CommandSequenceState.OUTSIDE, "<!--!", "-->"
        )
        assert state is CommandSequenceState.END
        assert text == " new; "

    def test_content_line(self):
        state, text = line_classify("# Title\n", CommandSequenceState.OUTSIDE, "<!--!", "-->")
        assert state is CommandSequenceState.OUTSIDE
        assert text == ""

    def test_region_opens(self):
        state, text = line_classify("  <!--! new;\n", CommandSequenceState.OUTSIDE, "<!--!", "-->")
        assert state is CommandSequenceState.WITHIN
        assert text == " new;\n"

    def test_region_closes(self):
        state, text = line_classify("  inject[x]; -->  \n", CommandSequenceState.WITHIN, "<!--!", "-->")
        assert state is CommandSequenceState.END
        assert text == "  inject[x]; "

    def test_plain_comment_is_content(self):
        state, _ = line_classify("<!-- note -->\n", CommandSequenceState.OUTSIDE, "<!--!", "-->")
        assert state is CommandSequenceState.OUTSIDE

    def test_comment_prefix(self):
        state, text = line_classify("# <!--! new; -->", CommandSequenceState.OUTSIDE, "<!--!", "-->", "#")
        assert state is CommandSequenceState.END
        assert text == " new; "

    def test_strip_regions(self):
        lines = ["a\n", "<!--! new;\n", "inject[x]; -->\n", "b\n", "<!--! new; -->\n"]
        assert commandRegions_strip(lines, "<!--!", "-->") == "a\nb\n"


class TestPages:
    """Test page creation and append mode"""

    def test_headline(self):
        """One page holding the appended content line"""
        assert process(["<!--! new; start-add; -->\n", "# Headline\n"]) == ["# Headline\n"]

    def test_four_empty_pages(self):
        assert process(["<!--! new; new; new; new; -->\n"]) == ["", "", "", ""]

    def test_no_commands(self):
        assert process(["# Title\n", "text\n"]) == []

    def test_multi_line_region(self):
        source = ["<!--! new;\n", "   start-add;\n", "-->\n", "a\n"]
        assert process(source) == ["a\n"]

    def test_stop_add(self):
        source = ["<!--! new; start-add; -->\n", "a\n", "<!--! stop-add; -->\n", "b\n"]
        assert process(source) == ["a\n"]

    def test_line_break_added_to_last_line(self):
        assert process("<!--! new; start-add; -->\nlast") == ["last\n"]

    def test_append_mode_ends_with_cell(self):
        state = PageState()
        process(["<!--! new; start-add; -->\n", "a\n"], state=state)
        process(["b\n"], state=state)
        assert state.pages == ["a\n"]

    def test_pages_span_cells(self):
        state = PageState()
        process(["<!--! new; start-add; -->\n", "a\n"], state=state)
        process(["<!--! start-add; -->\n", "b\n"], state=state)
        assert state.pages == ["a\nb\n"]

    def test_empty_region(self):
        assert process(["<!--! new; -->\n", "<!--!  -->\n"]) == [""]

    def test_markdown_heading_is_not_a_region(self):
        """The comment prefix only applies to code cells"""
        assert process(["# <!--! new; -->\n"]) == []

    def test_code_cell_region(self):
        source = ["# <!--! new; start-add; -->\n", "x = 1\n"]
        assert process(source, cell_type="code") == ["```python\nx = 1\n```\n"]

    def test_code_lines_fenced(self):
        """Python comments stay inside the fence instead of becoming headings"""
        source = ["# <!--! new; start-add; -->\n", "# compute\n", "x = 1\n"]
        assert process(source, cell_type="code") == ["```python\n# compute\nx = 1\n```\n"]

    def test_code_fence_closed_by_region(self):
        source = [
            "# <!--! new; start-add; -->\n",
            "x = 1\n",
            "# <!--! stop-add; -->\n",
            "hidden = 2\n",
            "# <!--! start-add; inject[between\\n]; -->\n",
            "y = 3\n",
        ]
        assert process(source, cell_type="code") == [
            "```python\nx = 1\n```\nbetween\n```python\ny = 3\n```\n"
        ]

    def test_code_fence_before_output(self):
        outputs = [{"output_type": "stream", "name": "stdout", "text": "1\n"}]
        source = ["# <!--! new; start-add; -->\n", "print(1)\n", "# <!--! add-stream; -->\n"]
        assert process(source, cell_type="code", outputs=outputs) == [
            "```python\nprint(1)\n```\n```\n1\n```\n"
        ]

    def test_code_without_page(self):
        with pytest.raises(UninitializedPageError):
            process(["# <!--! start-add; -->\n", "x = 1\n"], cell_type="code")

    def test_content_before_new(self):
        with pytest.raises(UninitializedPageError) as info:
            process(["<!--! start-add; -->\n", "text\n"])
        assert info.value.action == "start-add"

    def test_unterminated_region(self):
        with pytest.raises(UnterminatedCommandRegionError) as info:
            process(["text\n", "<!--! new;\n", "start-add;\n"])
        assert info.value.line_number == 2


class TestPageClass:
    """Test class[...]"""

    def test_applied_by_new(self):
        source = ["<!--! new; class[center]; start-add; -->\n", "a\n", "<!--! new; -->\n"]
        assert process(source) == ["class: center\n\na\n", ""]

    def test_last_class_wins(self):
        assert process(["<!--! new; class[a]; class[b]; new; -->\n"]) == ["class: b\n\n", ""]

    def test_class_before_first_page(self):
        with pytest.raises(UninitializedPageError) as info:
            process(["<!--! class[title]; new; -->\n"])
        assert info.value.action == "class"


class TestContentCommands:
    """Test inject, image, add-stream and add-error"""

    def test_inject(self):
        assert process(["<!--! new; inject[hello]; -->\n"]) == ["hello"]

    def test_inject_without_page(self):
        with pytest.raises(UninitializedPageError) as info:
            process(["<!--! inject[x]; -->\n"])
        assert info.value.action == "inject"

    def test_image(self):
        source = ['<!--! new; image[<img src="{}" width="50%">]; -->\n', "![](a.png)\n"]
        assert process(source) == ['<img src="a.png" width="50%">']

    def test_image_scans_whole_cell(self):
        source = [
            "![](a.png)\n",
            "<!--! new; image[{1} {0}]; -->\n",
            "<img src='b.png'>\n",
        ]
        assert process(source) == ["b.png a.png"]

    def test_image_error_keeps_following_commands(self):
        source = ["<!--! new; image[{3}]; inject[ok]; -->\n", "![](a.png)\n"]
        assert process(source) == ["ok"]

    def test_grammar_error_drops_region(self):
        source = [
            "<!--! new; -->\n",
            "<!--! inject[x]; bogus; -->\n",
            "<!--! inject[y] -->\n",
            "<!--! inject[z]; -->\n",
        ]
        assert process(source) == ["z"]

    def test_add_stream(self):
        outputs = [{"output_type": "stream", "name": "stdout", "text": ["hi\n", "there\n"]}]
        source = ["# <!--! new; add-stream; -->\n", "print('hi')\n"]
        assert process(source, cell_type="code", outputs=outputs) == ["```\nhi\nthere\n```\n"]

    def test_add_error(self):
        outputs = [
            {"output_type": "stream", "name": "stdout", "text": "partial\n"},
            {"output_type": "error", "ename": "ValueError", "evalue": "bad", "traceback": []},
        ]
        source = ["# <!--! new; add-error; -->\n", "raise ValueError('bad')\n"]
        assert process(source, cell_type="code", outputs=outputs) == ["```\nValueError: bad\n```\n"]

    def test_missing_output(self):
        source = ["# <!--! new; add-stream; inject[x]; -->\n"]
        assert process(source, cell_type="code", outputs=[]) == ["x"]


class TestDocumentConverter:
    """Test converting whole notebooks"""

    def test_pages_joined(self):
        converter = DocumentConverter(
            notebook("<!--! new; inject[a]; new; inject[b]; -->\n"), "pres/out.md"
        )
        assert converter.convert() == "a\n\n---\nb"
        assert converter.pages == ["a", "b"]

    def test_failed_cell_rolled_back(self):
        nb = notebook(
            "<!--! new; start-add; -->\na\n",
            "<!--! new; inject[lost]; -->\n<!--! stop-add;\n",
            "<!--! inject[b]; -->\n",
        )
        assert DocumentConverter(nb, "pres/out.md").pages_build() == ["a\nb"]

    def test_uninitialized_cell_skipped(self):
        nb = notebook("<!--! inject[x]; -->\n", "<!--! new; inject[y]; -->\n")
        assert DocumentConverter(nb, "pres/out.md").pages_build() == ["y"]

    def test_raw_cell_skipped(self):
        nb = Notebook(cells=[
            Cell(cell_type="raw", source="<!--! new; inject[raw]; -->\n"),
            Cell(cell_type="markdown", source="<!--! new; inject[md]; -->\n"),
        ])
        assert DocumentConverter(nb, "pres/out.md").pages_build() == ["md"]

    def test_class_at_document_end(self):
        nb = notebook("<!--! new; class[title]; start-add; -->\n# T\n")
        assert DocumentConverter(nb, "pres/out.md").pages_build() == ["class: title\n\n# T\n"]

    def test_references_relocated(self):
        nb = notebook("<!--! new; start-add; -->\n![](img/x.png)\n")
        assert DocumentConverter(nb, "pres/out.md").convert() == "![](../nb/img/x.png)\n"

    def test_source_path_override(self):
        nb = notebook("<!--! new; start-add; -->\n![](x.png)\n")
        converter = DocumentConverter(nb, "out.md", source_path="other/talk.ipynb")
        assert converter.convert() == "![](other/x.png)\n"

    def test_relocation_error(self):
        with pytest.raises(RelocationError):
            DocumentConverter(notebook("<!--! new; -->\n"), "").convert()

    def test_locations_relativize(self):
        output, source = locations_relativize(Path("/w/out/talk.rmd"), Path("/w/nb/a.ipynb"))
        assert output == Path("out/talk.rmd")
        assert source == Path("nb/a.ipynb")
