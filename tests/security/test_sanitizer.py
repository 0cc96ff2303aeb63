"""Test suite for XSS sanitization of submitted form values."""

import pytest

from formguard.security import DEFAULT_CONFIG, SanitizerConfig, XSSSanitizer, sanitize
from formguard.security.rules import NEVER_ALLOWED_STR

NEVER_ALLOWED_SAMPLES = [
    "javascript:",
    "JavaScript :",
    "document.location",
    "window.onload",
    "expression(",
    "vbscript:",
    "wscript:",
    "jscript:",
    "vbs:",
    "Redirect 302",
    "data:text/html;base64,",
]


class TestXSSSanitizer:
    """Test the sanitization pipeline on single strings."""

    def setup_method(self):
        """Set up test fixtures."""
        self.sanitizer = XSSSanitizer()

    def test_plain_text_is_untouched(self):
        """Ordinary form input passes through unchanged."""
        test_cases = [
            "Hello, world!",
            "John O'Brien",
            "line one\nline two",
            "user@example.com",
            "",
        ]

        for text in test_cases:
            assert self.sanitizer.clean(text) == text

    def test_script_tags_are_removed(self):
        """Script tags are replaced by the removal marker."""
        assert self.sanitizer.clean("<script>evil()</script>") == "[removed]evil()[removed]"

    def test_url_encoded_script_tags(self):
        """Percent-encoded tags are decoded before being filtered."""
        result = self.sanitizer.clean("%3Cscript%3Ealert(1)%3C/script%3E")

        assert result == "[removed]alert&#40;1&#41;[removed]"

    def test_event_handler_attributes(self):
        """Event handler attributes are replaced with xss=removed."""
        result = self.sanitizer.clean('<img src="x.png" onerror="evil()">')

        assert result == '<img src="x.png" xss=removed>'

    def test_event_handlers_never_survive(self):
        """No on* attribute survives, whatever tag carries it."""
        test_cases = [
            "<div onclick=\"alert('XSS')\">Click me</div>",
            '<img src="x" onerror="alert(\'XSS\')">',
            '<a href="#" onmouseover="alert(\'XSS\')">Link</a>',
            "<p onfocus=\"alert('XSS')\">",
        ]

        for html in test_cases:
            sanitized = self.sanitizer.clean(html)
            assert "onclick" not in sanitized
            assert "onerror" not in sanitized
            assert "onmouseover" not in sanitized
            assert "onfocus" not in sanitized

    def test_javascript_links(self):
        """javascript: hrefs are dropped from links."""
        assert self.sanitizer.clean('<a href="javascript:alert(1)">x</a>') == "<a>x</a>"

    def test_safe_links_are_kept(self):
        """Query strings in ordinary links survive entity decoding."""
        link = '<a href="http://example.com/?a=1&b=2">link</a>'

        assert self.sanitizer.clean(link) == link

    def test_exploded_words(self):
        """Keywords spelled with spaces between letters are compacted and filtered."""
        assert self.sanitizer.clean("j a v a s c r i p t:alert(1)") == "[removed]alert&#40;1&#41;"

    def test_invisible_characters(self):
        """Control characters hidden inside keywords are stripped."""
        assert self.sanitizer.clean("java\x00script:alert(1)") == "[removed]alert&#40;1&#41;"

    def test_tabs_become_spaces(self):
        """Tabs are turned into spaces."""
        assert self.sanitizer.clean("a\tb") == "a b"

    def test_never_allowed_strings(self):
        """Dangerous literals are removed or escaped."""
        assert self.sanitizer.clean("document.cookie") == "[removed]"
        assert self.sanitizer.clean("prefix <!-- suffix") == "prefix &lt;!-- suffix"
        assert self.sanitizer.clean("prefix <% suffix") == "prefix &lt;&#37; suffix"

    def test_server_tags(self):
        """PHP-style processing instructions are escaped."""
        assert self.sanitizer.clean("<?php echo 1; ?>") == "&lt;?php echo 1; ?&gt;"

    def test_naughty_tags_are_escaped(self):
        """Naughty tags come out entity-escaped instead of being removed."""
        result = self.sanitizer.clean('<iframe src="x"></iframe>')

        assert result == '&lt;iframe src="x"&gt;&lt;/iframe&gt;'

    def test_unclosed_tags_are_escaped(self):
        """A stray "<" cannot open a tag."""
        assert self.sanitizer.clean("Hello <3 world") == "Hello &lt;3 world"

    def test_naughty_functions(self):
        """Calls to dangerous functions get their parentheses escaped."""
        assert self.sanitizer.clean("eval('x')") == "eval&#40;'x'&#41;"

    def test_idempotent(self):
        """Sanitizing an already sanitized value changes nothing."""
        test_cases = [
            "<script>evil()</script>",
            '<img src="x.png" onerror="evil()">',
            "j a v a s c r i p t:alert(1)",
            '<iframe src="x"></iframe>',
            "%3Cscript%3Ealert(1)%3C/script%3E",
            '<a href="javascript:alert(1)">x</a>',
        ]

        for text in test_cases:
            once = self.sanitizer.clean(text)
            assert self.sanitizer.clean(once) == once


class TestSanitizeValues:
    """Test sanitization of structured values."""

    def setup_method(self):
        """Set up test fixtures."""
        self.sanitizer = XSSSanitizer()

    def test_lists_keep_their_shape(self):
        result = self.sanitizer.sanitize(["safe", "<script>x</script>"])

        assert result == ["safe", "[removed]x[removed]"]

    def test_dicts_keep_their_keys(self):
        result = self.sanitizer.sanitize({"name": "<script>x</script>", "age": "30"})

        assert result == {"name": "[removed]x[removed]", "age": "30"}

    def test_nested_values(self):
        result = self.sanitizer.sanitize({"tags": ("one", "<script>")})

        assert result == {"tags": ("one", "[removed]")}

    def test_bytes_are_decoded(self):
        assert self.sanitizer.sanitize(b"hello") == "hello"

    def test_other_scalars_pass_through(self):
        assert self.sanitizer.sanitize(5) == 5
        assert self.sanitizer.sanitize(None) is None

    def test_module_level_sanitize(self):
        """The shared sanitizer behaves like a fresh instance."""
        assert sanitize("<script>x</script>") == "[removed]x[removed]"


class TestSanitizerConfig:
    """Test sanitizer configuration."""

    def test_defaults(self):
        assert DEFAULT_CONFIG.charset == "UTF-8"
        assert DEFAULT_CONFIG.max_iterations == 32
        assert "iframe" in DEFAULT_CONFIG.naughty_tags

    def test_invalid_iteration_cap(self):
        with pytest.raises(ValueError):
            SanitizerConfig(max_iterations=0)

    def test_overrides(self):
        config = DEFAULT_CONFIG.with_overrides(charset="latin-1", max_iterations=4)

        assert config.charset == "latin-1"
        assert config.max_iterations == 4
        assert config.naughty_tags == DEFAULT_CONFIG.naughty_tags

    def test_custom_naughty_tags(self):
        """Tags outside a custom list are kept."""
        sanitizer = XSSSanitizer(SanitizerConfig(naughty_tags=("blink",)))

        assert sanitizer.clean("<b>bold</b>") == "<b>bold</b>"
        assert sanitizer.clean("<blink>x</blink>") == "&lt;blink&gt;x&lt;/blink&gt;"

    def test_charset_decodes_bytes(self):
        sanitizer = XSSSanitizer(SanitizerConfig(charset="latin-1"))

        assert sanitizer.sanitize("café".encode("latin-1")) == "café"


class TestNeverAllowed:
    """Every never-allowed literal and pattern is neutralized wherever it appears."""

    def setup_method(self):
        """Set up test fixtures."""
        self.sanitizer = XSSSanitizer()

    @pytest.mark.parametrize("literal, replacement", NEVER_ALLOWED_STR)
    def test_literals(self, literal, replacement):
        result = self.sanitizer.clean("prefix " + literal + " suffix")

        assert result == "prefix " + replacement + " suffix"

    @pytest.mark.parametrize("sample", NEVER_ALLOWED_SAMPLES)
    def test_patterns(self, sample):
        assert self.sanitizer.clean("prefix " + sample + " suffix") == "prefix [removed] suffix"


class TestLongInput:
    """Test values with many stray or unclosed tags."""

    def setup_method(self):
        """Set up test fixtures."""
        self.sanitizer = XSSSanitizer()

    def test_stray_brackets_cannot_hide_a_tag(self):
        text = "< " * 1100 + '<div onmouseover="steal()">hi</div>'

        result = self.sanitizer.clean(text)

        assert result == "&lt; " * 1100 + "<div xss=removed>hi</div>"
        assert self.sanitizer.clean(result) == result

    @pytest.mark.parametrize("prefix", ["<", "</", '<"', "<'"])
    def test_other_stray_prefixes(self, prefix):
        text = prefix * 1100 + '<div onmouseover="steal()">hi</div>'

        result = self.sanitizer.clean(text)

        assert "onmouseover" not in result
        assert result.endswith("<div xss=removed>hi</div>")
        assert self.sanitizer.clean(result) == result

    def test_runs_of_brackets(self):
        assert self.sanitizer.clean("<" * 5000) == "&lt;" * 5000

    def test_runs_of_unclosed_tags(self):
        assert self.sanitizer.clean("<x " * 2000) == "&lt;x " * 2000

    def test_single_iteration_still_neutralizes(self):
        """The tag stage finishes in one pass, even with the smallest iteration cap."""
        sanitizer = XSSSanitizer(SanitizerConfig(max_iterations=1))

        result = sanitizer.clean("< " * 1100 + '<div onmouseover="steal()">hi</div>')

        assert "onmouseover" not in result
