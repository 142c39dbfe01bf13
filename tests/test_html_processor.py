import pytest

from aitrans.errors import MismatchedResponseError
from aitrans.fragment import parse_fragment, serialize_fragment
from aitrans.html_processor import (
    SKIPPED_INDEX,
    HTMLProcessor,
    TextUnit,
    detect_input_format,
    extract,
    iter_text_units,
    reassemble,
)
from aitrans.sanitizer import sanitize
from tests.conftest import FakeTranslationService


SAMPLE = (
    '<div class="post"><h2>Title</h2>'
    '<p>Hello <b>world</b>, see <code>x = 1</code>.</p>'
    '<pre>keep   this</pre>'
    '<script>var secret = "do not send";</script>'
    '<style>p { color: red; }</style>'
    '<p>  </p>'
    '<ul><li>One</li><li>Two</li></ul></div>'
)


def test_extract_returns_translatable_leaves_in_document_order():
    units = extract(parse_fragment(SAMPLE))
    assert [unit.value for unit in units] == ["Title", "Hello ", "world", ", see ", ".", "One", "Two"]
    assert [unit.index for unit in units] == list(range(7))
    assert not any(unit.skip for unit in units)


def test_extract_never_contains_excluded_region_text():
    values = [unit.value for unit in extract(parse_fragment(SAMPLE))]
    joined = "".join(values)
    assert "x = 1" not in joined
    assert "keep" not in joined
    assert "secret" not in joined
    assert "color" not in joined


def test_excluded_ancestor_excludes_nested_text():
    units = extract(parse_fragment("<pre><span>nested <b>deep</b></span></pre><p>ok</p>"))
    assert [unit.value for unit in units] == ["ok"]


def test_notranslate_markers_are_excluded():
    html = '<p translate="no">Brand</p><span class="x notranslate">Name</span><p>text</p>'
    assert [unit.value for unit in extract(parse_fragment(html))] == ["text"]


def test_iter_text_units_reports_skipped_leaves():
    units = list(iter_text_units(parse_fragment("<p>a</p><code>b</code><p>c</p>")))
    assert units == [
        TextUnit(0, "a", False),
        TextUnit(SKIPPED_INDEX, "b", True),
        TextUnit(1, "c", False),
    ]


def test_extract_is_restartable():
    fragment = parse_fragment(SAMPLE)
    assert extract(fragment) == extract(fragment)


def test_identity_translation_equals_sanitized_input():
    html = '<div onclick="x()"><p>Hi <a href="javascript:evil()">there</a></p><code>c</code><font>f</font></div>'
    fragment = parse_fragment(html)
    units = extract(fragment)
    out = reassemble(fragment, units, [unit.value for unit in units])
    assert out == sanitize(serialize_fragment(parse_fragment(html)))


def test_reassemble_writes_translations_back_in_place():
    fragment = parse_fragment('<p class="intro">Hello <b>world</b></p><code>print()</code>')
    units = extract(fragment)
    out = reassemble(fragment, units, ["Xin chào", "thế giới"])
    assert out == "<p>Xin chào <b>thế giới</b></p><code>print()</code>"


def test_reassemble_does_not_mutate_the_input_fragment():
    fragment = parse_fragment("<p>Hello</p>")
    units = extract(fragment)
    reassemble(fragment, units, ["Bonjour"])
    assert serialize_fragment(fragment) == "<p>Hello</p>"


def test_reassemble_escapes_markup_inside_translations():
    fragment = parse_fragment("<p>Hello</p>")
    out = reassemble(fragment, extract(fragment), ['<img src=x onerror="alert(1)">'])
    assert "<img" not in out
    assert out == '<p>&lt;img src=x onerror="alert(1)"&gt;</p>'


def test_reassemble_rejects_length_mismatch():
    fragment = parse_fragment("<p>a</p><p>b</p>")
    units = extract(fragment)
    with pytest.raises(MismatchedResponseError) as excinfo:
        reassemble(fragment, units, ["only one"])
    assert excinfo.value.expected == 2
    assert excinfo.value.got == 1


def test_reassemble_rejects_units_from_another_fragment():
    units = extract(parse_fragment("<p>a</p>"))
    with pytest.raises(ValueError):
        reassemble(parse_fragment("<p>b</p>"), units, ["x"])


def test_detect_input_format():
    assert detect_input_format("page.HTML", "plain words") == "html"
    assert detect_input_format("notes.txt", "<p>tagged</p>") == "html"
    assert detect_input_format("notes.md", "# Title\n\n1 < 2") == "text"


@pytest.mark.asyncio
async def test_translate_html_content_batches_all_units_in_one_request():
    service = FakeTranslationService()
    processor = HTMLProcessor(service, debug=False)
    out = await processor.translate_html_content('<p>Hello <i>there</i></p><pre>code</pre>')
    assert out == "<p>HELLO <i>THERE</i></p><pre>code</pre>"
    assert len(service.prompts) == 1
    assert '["Hello ", "there"]' in service.prompts[0]


@pytest.mark.asyncio
async def test_translate_html_content_without_text_makes_no_request():
    service = FakeTranslationService()
    processor = HTMLProcessor(service, debug=False)
    assert await processor.translate_html_content('<p> </p><br><img src="a.png">') == "<p> </p><br>"
    assert service.prompts == []


@pytest.mark.asyncio
async def test_translate_html_content_falls_back_to_whole_fragment():
    service = FakeTranslationService(replies=["<pre>translated</pre><script>x()</script>"])
    processor = HTMLProcessor(service, debug=False)
    out = await processor.translate_html_content("<pre>only code</pre>")
    assert out == "<pre>translated</pre>x()"
    assert "HTML:\n<pre>only code</pre>" in service.prompts[0]


@pytest.mark.asyncio
async def test_translate_html_content_surfaces_mismatch():
    service = FakeTranslationService(replies=['["just one"]'])
    processor = HTMLProcessor(service, debug=False)
    with pytest.raises(MismatchedResponseError):
        await processor.translate_html_content("<p>a</p><p>b</p>")


@pytest.mark.asyncio
async def test_translate_text_content_renders_markdown():
    service = FakeTranslationService(replies=["# Tiêu đề\n\n**đậm** và *nghiêng*"])
    processor = HTMLProcessor(service, debug=False)
    out = await processor.translate_text_content("# Title\n\n**bold** and *italic*")
    assert out == "<h1>Tiêu đề</h1>\n<p><strong>đậm</strong> và <em>nghiêng</em></p>"
    assert "Text:\n# Title" in service.prompts[0]


@pytest.mark.asyncio
async def test_translate_file_writes_default_output(tmp_path):
    source = tmp_path / "page.html"
    source.write_text("<p>Hello</p>", encoding="utf-8")
    processor = HTMLProcessor(FakeTranslationService(), debug=False)

    output = await processor.translate_file(str(source))

    assert output == str(tmp_path / "page_translated.html")
    assert (tmp_path / "page_translated.html").read_text(encoding="utf-8") == "<p>HELLO</p>"


@pytest.mark.asyncio
async def test_translate_file_text_input_gets_html_extension(tmp_path):
    source = tmp_path / "notes.txt"
    source.write_text("plain words", encoding="utf-8")
    processor = HTMLProcessor(FakeTranslationService(replies=["mots simples"]), debug=False)

    output = await processor.translate_file(str(source))

    assert output == str(tmp_path / "notes_translated.html")
    assert (tmp_path / "notes_translated.html").read_text(encoding="utf-8") == "<p>mots simples</p>"


@pytest.mark.asyncio
async def test_translate_file_missing_input(tmp_path):
    processor = HTMLProcessor(FakeTranslationService(), debug=False)
    with pytest.raises(FileNotFoundError):
        await processor.translate_file(str(tmp_path / "missing.html"))


def test_reassemble_keeps_attribute_order():
    fragment = parse_fragment('<div lang="en" dir="ltr"><span dir="rtl" lang="ar">Hello</span></div>')
    out = reassemble(fragment, extract(fragment), ["Bonjour"])
    assert out == '<div lang="en" dir="ltr"><span dir="rtl" lang="ar">Bonjour</span></div>'


def test_translate_attribute_is_case_insensitive():
    html = '<p translate="NO">Brand</p><p translate=" No ">Name</p><p translate="yes">text</p>'
    assert [unit.value for unit in extract(parse_fragment(html))] == ["text"]


def test_extract_handles_deeply_nested_fragments():
    depth = 1500
    html = "<span>" * depth + "deep" + "</span>" * depth + "<p>shallow</p>"
    assert [unit.value for unit in extract(parse_fragment(html))] == ["deep", "shallow"]
