"""
Image reference tests

Tests the reference scanner, the image template engine and the relocation
of relative references.
"""

import pytest

from nbdeck.lib.relocate import parent_get, path_generate, references_relocate
from nbdeck.lib.scanner import references_scan
from nbdeck.lib.wrap import (
    IndexOutOfRangeError,
    InvalidIndexError,
    MalformedTemplateError,
    images_wrap,
    template_apply,
)
from nbdeck.models.pages import ImageReference


def ref(content):
    """Reference with a dummy span"""
    return ImageReference(content=content, start=0, end=len(content))


class TestScanner:
    """Test locating image references"""

    def test_empty(self):
        assert references_scan("") == []

    def test_no_references(self):
        assert references_scan("# Title\n\nplain text with (parens) and <b>tags</b>") == []

    def test_markdown_and_html(self):
        """Both forms, in document order, with exact spans"""
        text = '![](a.png)\nsome text\n<img src="b.png">'
        refs = references_scan(text)

        assert [r.content for r in refs] == ["a.png", "b.png"]
        assert refs[0].span == (4, 9)
        assert refs[1].span == (31, 36)
        for r in refs:
            assert text[r.start:r.end] == r.content

    def test_markdown_image(self):
        refs = references_scan("![Some Deskription](./images/image.png)")
        assert refs == [ImageReference("./images/image.png", 20, 38)]

    def test_html_double_quotes(self):
        refs = references_scan('<img src="./images/image.png" width="60%">\n')
        assert refs == [ImageReference("./images/image.png", 10, 28)]

    def test_html_single_quotes(self):
        refs = references_scan("<img width='60%' src='./x.png'>")
        assert [r.content for r in refs] == ["./x.png"]

    def test_html_whitespace_around_equals(self):
        refs = references_scan('<src = "./images/image2.png">')
        assert [r.content for r in refs] == ["./images/image2.png"]

    def test_mixed_sequence(self):
        text = '<img src="./image1.png">\n![Image1](./image2.png)\n<img src="./image3.png">'
        refs = references_scan(text)
        assert [(r.content, r.span) for r in refs] == [
            ("./image1.png", (10, 22)),
            ("./image2.png", (35, 47)),
            ("./image3.png", (59, 71)),
        ]

    def test_unclosed_tag_skipped(self):
        """A tag without '>' yields no reference"""
        assert references_scan('<img src="a.png"') == []

    def test_malformed_markdown_skipped(self):
        """Scanning resumes after malformed markup"""
        refs = references_scan("![broken(x.png) and ![ok](y.png)")
        assert [r.content for r in refs] == ["y.png"]

    def test_path_ends_at_first_parenthesis(self):
        refs = references_scan("![a](x.png and then ![b](y.png)")
        assert [r.content for r in refs] == ["x.png and then ![b](y.png"]

    def test_link_is_not_image(self):
        """Plain links are not image references"""
        assert references_scan("[link](page.html)") == []

    def test_escaped_quote_in_attribute(self):
        refs = references_scan('<img src="a\\"b.png">')
        assert refs[0].content == 'a"b.png'
        assert refs[0].span == (10, 18)

    def test_unclosed_quote_stops_at_line_end(self):
        """An unclosed attribute does not swallow the following lines"""
        text = '<img src="a.png\n<img src="b.png">'
        assert [r.content for r in references_scan(text)] == ["b.png"]

    def test_many_unclosed_attributes(self):
        text = '<x src="' * 2000 + '\n![](a.png)'
        assert [r.content for r in references_scan(text)] == ["a.png"]

    def test_idempotent(self):
        text = "![](a.png) <img src='b.png'>"
        assert references_scan(text) == references_scan(text)


class TestTemplate:
    """Test filling image templates"""

    def test_auto_placeholders(self):
        result = template_apply("![x]({})  ![x]({})", [ref("a.png"), ref("b.png")])
        assert result == "![x](a.png)  ![x](b.png)"

    def test_explicit_placeholders(self):
        assert template_apply("{1} {0}", [ref("a"), ref("b")]) == "b a"

    def test_mixed_placeholders_use_position(self):
        """{} takes its position among all placeholders"""
        refs = [ref("a"), ref("b")]
        assert template_apply("{1} {}", refs) == "b b"
        assert template_apply("{0} {}", refs) == "a b"
        assert template_apply("{} {0}", refs) == "a a"

    def test_no_placeholders(self):
        assert template_apply("plain <b>text</b>", []) == "plain <b>text</b>"

    def test_literal_closing_brace(self):
        assert template_apply("a } b {}", [ref("x")]) == "a } b x"

    def test_invalid_index(self):
        with pytest.raises(InvalidIndexError) as info:
            template_apply("{x}", [ref("a")])
        assert info.value.raw == "x"

    def test_negative_index(self):
        with pytest.raises(InvalidIndexError):
            template_apply("{-1}", [ref("a")])

    def test_index_out_of_range(self):
        with pytest.raises(IndexOutOfRangeError) as info:
            template_apply("{2}", [ref("a"), ref("b")])
        assert (info.value.index, info.value.available) == (2, 2)

    def test_auto_index_out_of_range(self):
        with pytest.raises(IndexOutOfRangeError) as info:
            template_apply("{}", [])
        assert (info.value.index, info.value.available) == (0, 0)

    def test_malformed(self):
        with pytest.raises(MalformedTemplateError):
            template_apply("![]({0)", [ref("a")])

    def test_images_wrap(self):
        wrap = "![Some Image]({})  \n![Some Image]({})"
        markdown = "![](./images/image1.png)\nsome text\n![](./images/image2.png)"
        assert images_wrap(markdown, wrap) == (
            "![Some Image](./images/image1.png)  \n![Some Image](./images/image2.png)"
        )


class TestRelocation:
    """Test rewriting references for the presentation location"""

    def test_relative_reference(self):
        result = references_relocate("pres/out.md", "nb/in.ipynb", "![](./img/x.png)")
        assert result == "![](../nb/./img/x.png)"

    def test_mixed_document(self):
        markdown = (
            "# Header\n![](./images/image1.png)\n<src = \"./images/image2.png\">\n"
            "![](https://webimage/image.png)\nSome Text"
        )
        result = references_relocate("presentations/output.rmd", "notebooks/input.ipynb", markdown)
        assert result == (
            "# Header\n![](../notebooks/./images/image1.png)\n"
            "<src = \"../notebooks/./images/image2.png\">\n"
            "![](https://webimage/image.png)\nSome Text"
        )

    def test_after_wrap(self):
        markdown = (
            "Here Is a cell with images.  \n<img src = \"./../images/image1.png\">  "
            "The text gets ignored.  \n![Image1](./../images/image2.png)  \n"
        )
        wrapped = images_wrap(markdown, "wrap-image[<img src=\"{}\">\n\n![Image1]({})]")
        result = references_relocate("presentations/output.rmd", "notebooks/input.ipynb", wrapped)
        assert result == (
            "wrap-image[<img src=\"../notebooks/./../images/image1.png\">\n\n"
            "![Image1](../notebooks/./../images/image2.png)]"
        )

    def test_several_references(self):
        """Later spans stay valid while earlier references grow"""
        result = references_relocate("pres/out.md", "nb/i.ipynb", "![](a.png) ![](b.png)")
        assert result == "![](../nb/a.png) ![](../nb/b.png)"

    def test_escaped_quote_kept(self):
        """The path is rewritten as written, so the attribute stays closed"""
        result = references_relocate("pres/o.md", "nb/i.ipynb", '<img src="a\\"b.png">')
        assert result == '<img src="../nb/a\\"b.png">'

    def test_absolute_and_urls_unchanged(self):
        text = "![](/abs/a.png)\n<img src='http://x/b.png'>\n![](https://y/c.png)\nno images"
        assert references_relocate("pres/out.md", "nb/in.ipynb", text) == text

    def test_output_without_directory(self):
        assert references_relocate("out.md", "nb/a.ipynb", "![](x.png)") == "![](nb/x.png)"

    def test_source_without_directory(self):
        assert references_relocate("pres/out.md", "a.ipynb", "![](x.png)") == "![](../x.png)"

    def test_absolute_source(self):
        result = references_relocate("pres/out.md", "/data/nb/a.ipynb", "![](x.png)")
        assert result == "![](/data/nb/x.png)"

    def test_missing_parent(self):
        """Locations without a file name are a caller error"""
        assert references_relocate("", "nb/a.ipynb", "text") is None
        assert references_relocate("pres/out.md", "/", "text") is None

    def test_parent_get(self):
        assert str(parent_get("pres/out.md")) == "pres"
        assert str(parent_get("out.md")) == "."
        assert parent_get(".") is None

    def test_path_generate(self):
        assert path_generate("a/b/out.md", "nb/in.ipynb", "x.png") == "../../nb/x.png"
