import plantuml
from markdown_it import MarkdownIt
from mdit_py_plugins.anchors import anchors_plugin

from pretty_md_pdf.plugins import (
    TOC_MARKER_RE,
    build_toc,
    math_plugin,
    plantuml_plugin,
    plantuml_url,
    toc_plugin,
)

SERVER = "https://uml.example.com/plantuml"


def _engine(*plugins):
    md = MarkdownIt("js-default", {"html": True})
    for plugin, kwargs in plugins:
        md.use(plugin, **kwargs)
    return md


def test_plantuml_url_uses_library_encoding():
    source = "@startuml\nA -> B\n@enduml"
    expected = SERVER + "/svg/" + plantuml.deflate_and_encode(source)
    assert plantuml_url(source, SERVER + "/") == expected


def test_plantuml_fence_becomes_image():
    md = _engine((plantuml_plugin, {"server": SERVER}))
    html = md.render("```plantuml\nA -> B\n```\n")
    expected = plantuml_url("@startuml\nA -> B\n@enduml", SERVER)
    assert html == f'<img src="{expected}" alt="uml diagram">\n'


def test_plantuml_marker_block_becomes_image():
    md = _engine((plantuml_plugin, {"server": SERVER}))
    html = md.render("Before\n\n@startuml\nA -> B\n@enduml\n\nAfter\n")
    expected = plantuml_url("@startuml\nA -> B\n@enduml", SERVER)
    assert f'<img src="{expected}" alt="uml diagram">' in html
    assert "<p>Before</p>" in html
    assert "<p>After</p>" in html
    assert "@enduml" not in html


def test_unclosed_plantuml_marker_stays_text():
    md = _engine((plantuml_plugin, {"server": SERVER}))
    html = md.render("@startuml\nA -> B\n")
    assert "<img" not in html
    assert "@startuml" in html


def test_other_fences_are_untouched():
    md = _engine((plantuml_plugin, {"server": SERVER}))
    assert md.render("```text\nA -> B\n```\n") == '<pre><code class="language-text">A -&gt; B\n</code></pre>\n'


def test_inline_math_markup():
    md = _engine((math_plugin, {}))
    html = md.render("Euler: $e^{i\\pi} = -1$\n")
    assert '<span class="math inline">\\(e^{i\\pi} = -1\\)</span>' in html


def test_block_math_markup():
    md = _engine((math_plugin, {}))
    html = md.render("$$\na < b\n$$\n")
    assert '<div class="math block">' in html
    assert "\\[" in html and "\\]" in html
    assert "a &lt; b" in html


def test_prices_are_not_math():
    md = _engine((math_plugin, {}))
    assert md.render("It costs $5 or $10.\n") == "<p>It costs $5 or $10.</p>\n"


def test_toc_marker_variants():
    for marker in ("[toc]", "[TOC]", "[[toc]]", "${toc}"):
        assert TOC_MARKER_RE.match(marker)
    assert not TOC_MARKER_RE.match("see [toc] here")


def test_build_toc_nests_levels():
    html = build_toc([(1, "a", "A"), (2, "b", "B"), (2, "c", "C"), (1, "d", "D")])
    assert html == (
        '<nav class="table-of-contents"><ol>'
        '<li><a href="#a">A</a><ol>'
        '<li><a href="#b">B</a></li>'
        '<li><a href="#c">C</a></li></ol></li>'
        '<li><a href="#d">D</a></li></ol>'
        "</nav>\n"
    )


def test_build_toc_without_headings():
    assert build_toc([]) == '<nav class="table-of-contents"></nav>\n'


def test_toc_marker_followed_by_text():
    md = _engine((anchors_plugin, {"permalink": True}), (toc_plugin, {}))
    html = md.render("[toc]\nIntro text\n\n# First\n\n## Second & more\n")
    assert html.startswith('<nav class="table-of-contents">')
    assert "<p>Intro text</p>" in html
    assert '<a href="#first">First</a>' in html
    assert "Second &amp; more</a>" in html
    assert "¶" not in html.split("</nav>")[0]


def test_toc_marker_inside_text():
    md = _engine((anchors_plugin, {}), (toc_plugin, {}))
    html = md.render("See [[TOC]] for the outline.\n\n# Only\n")
    assert html.startswith('<p>See <nav class="table-of-contents"><ol><li><a href="#only">Only</a>')
    assert "</nav>\n for the outline.</p>" in html
