from src.domain.sanitize import sanitize_markdown, sanitize_text, sanitize_url, strip_html

SCHEMES = ["http", "https"]


def test_strip_html():
    assert strip_html("<b>Bold</b> text") == "Bold text"


def test_sanitize_text_strips_and_trims():
    assert sanitize_text("  <em>Hello</em> World  ") == "Hello World"
    assert sanitize_text("<script></script>") == ""


def test_markdown_keeps_plain_markdown():
    md = "# Title\n\nSome *emphasis* and a [link](https://example.com)."
    assert sanitize_markdown(md) == md


def test_markdown_removes_script_blocks():
    md = "Before<script>alert('x')</script>After"
    assert sanitize_markdown(md) == "BeforeAfter"


def test_markdown_removes_iframes_and_void_elements():
    md = 'A<iframe src="https://evil"></iframe>B<embed src="x">C<meta http-equiv="refresh">D'
    assert sanitize_markdown(md) == "ABCD"


def test_markdown_removes_event_handlers():
    result = sanitize_markdown('<img src="a.png" onerror="alert(1)">')
    assert "onerror" not in result
    assert 'src="a.png"' in result


def test_markdown_removes_script_urls():
    result = sanitize_markdown("[x](javascript:alert(1)) [y](data:text/html,hi)")
    assert "javascript:" not in result
    assert "data:text/html" not in result


def test_sanitize_url():
    assert sanitize_url("https://example.com/a.png", SCHEMES) == "https://example.com/a.png"
    assert sanitize_url("  http://example.com  ", SCHEMES) == "http://example.com"
    assert sanitize_url("javascript:alert(1)", SCHEMES) is None
    assert sanitize_url("ftp://example.com/file", SCHEMES) is None
    assert sanitize_url("/relative/path.png", SCHEMES) is None
