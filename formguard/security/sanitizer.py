"""XSS sanitization of submitted form data.

The sanitizer is a string-to-string transform. It never rejects input: the
worst case is an over-neutralized string. Each scalar goes through a fixed
pipeline of regex passes (see ``XSSSanitizer.clean_once``) and the pipeline is
re-applied to its own output until nothing changes, so sanitizing an already
sanitized value is a no-op.
"""

from functools import lru_cache
import html
from html.entities import html5
import logging
import re
import secrets
from typing import Any, Dict, Optional
from urllib.parse import unquote

from formguard.config import get_charset, get_max_iterations
from formguard.security.rules import DEFAULT_CONFIG, SanitizerConfig

logger = logging.getLogger(__name__)

# url encoded 00-08, 11, 12, 14, 15, 16-31 and 127
INVISIBLE_ENCODED_PATTERNS = (
    re.compile(r"%0[0-8bcef]", re.IGNORECASE),
    re.compile(r"%1[0-9a-f]", re.IGNORECASE),
    re.compile(r"%7f", re.IGNORECASE),
)
# every control character except newline, carriage return and horizontal tab
INVISIBLE_PATTERN = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]+")

PERCENT_SPACED_PATTERN = re.compile(r"%(?:\s*[0-9a-f]){2,}", re.IGNORECASE)
WHITESPACE_PATTERN = re.compile(r"\s+")

# A fragment starts where a run of separators starts (or right after the previous quote)
ATTRIBUTE_VALUE_PATTERN = re.compile(
    r"(?<![^a-z0-9>\"'])[^a-z0-9>]+[a-z0-9]+=(['\"]).*?\1", re.IGNORECASE | re.DOTALL
)
TAG_TAIL_PATTERN = re.compile(r"<\w+.*", re.IGNORECASE | re.DOTALL)
QUERY_PAIR_PATTERN = re.compile(r"&([a-z_0-9\-]+)=([a-z_0-9\-/]+)", re.IGNORECASE)

# Entities without the closing semicolon are still honoured by browsers
NAMED_ENTITY_PATTERN = re.compile(r"&[a-z]{2,}(?![a-z;])", re.IGNORECASE)
NUMERIC_ENTITY_PATTERN = re.compile(
    r"(&#(?:x0*[0-9a-f]{2,5}(?![0-9a-f;])|(?:0*\d{2,4}(?![0-9;]))))", re.IGNORECASE
)

LINK_TAG_PATTERN = re.compile(r"<a(?:rea)?[^a-z0-9>]+([^>]*?)(?:>|$)", re.IGNORECASE | re.DOTALL)
IMG_TAG_PATTERN = re.compile(r"<img[^a-z0-9]+([^>]*?)(?:\s?/?>|$)", re.IGNORECASE | re.DOTALL)
SCRIPT_TAG_PATTERN = re.compile(r"</*(?:script|xss).*?>", re.IGNORECASE | re.DOTALL)
LINK_HREF_PATTERN = re.compile(
    r"href=.*?(?:(?:alert|prompt|confirm)(?:\(|&#40;|`|&#96;)|javascript:|livescript:|mocha:"
    r"|charset=|window\.|\(?document\)?\.|\.cookie|<script|<xss|d\s*a\s*t\s*a\s*:)",
    re.IGNORECASE | re.DOTALL,
)
IMG_SRC_PATTERN = re.compile(
    r"src=.*?(?:(?:alert|prompt|confirm|eval)(?:\(|&#40;|`|&#96;)|javascript:|livescript:|mocha:"
    r"|charset=|window\.|\(?document\)?\.|\.cookie|<script|<xss|base64\s*,)",
    re.IGNORECASE | re.DOTALL,
)
QUOTED_ATTRIBUTE_PATTERN = re.compile(r"\s*[a-z\-]+\s*=\s*([\"'])(.*?)\1", re.IGNORECASE | re.DOTALL)
CSS_COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)

# Any "<...>" fragment: slash, tag name, attributes and the (optional) closing ">"
TAG_PATTERN = re.compile(
    r"<((?P<slash>/*\s*)((?P<tag_name>[a-z0-9]+)(?=[^a-z0-9]|$)|.+)"
    # a valid attribute character immediately after the tag counts as a separator
    r"[^\s\"'a-z0-9>/=]*"
    r"(?P<attributes>(?:[\s\"'/=]*"
    r"[^\s\"'>/=]+"
    r"(?:\s*="
    r"(?:[^\s\"'=><`]+|\s*\"[^\"]*\"|\s*'[^']*'|\s*[^\s\"'=><`]*?)"
    r")?"
    r")*)"
    r"[^>]*)(?P<close_tag>>)?",
    re.IGNORECASE | re.DOTALL,
)
ATTRIBUTE_PATTERN = re.compile(
    r"(?P<name>[^\s\"'>/=]+)"
    r"(?:\s*=(?P<value>[^\s\"'=><`]+|\s*\"[^\"]*\"|\s*'[^']*'|\s*[^\s\"'=><`]*?))",
    re.IGNORECASE,
)
LEADING_NON_ALPHA_PATTERN = re.compile(r"^[^a-z]+", re.IGNORECASE)
# A "<" that no tag name follows can never open a tag
STRAY_OPEN_BRACKET_PATTERN = re.compile(r"<(?!/*\s*[a-z0-9])", re.IGNORECASE)


def _build_entity_table() -> Dict[str, str]:
    """Map lowercased HTML5 entity names (without ';') to their characters."""
    table: Dict[str, str] = {}
    # Names that are already lowercase win over their capitalized variants
    for name, char in sorted(html5.items(), key=lambda item: item[0] != item[0].lower()):
        if name.endswith(";"):
            table.setdefault(name[:-1].lower(), char)
    return table


ENTITY_TABLE = _build_entity_table()


class XSSSanitizer:
    """Neutralizes script-injection vectors in submitted strings."""

    def __init__(self, config: Optional[SanitizerConfig] = None):
        self.config = config or DEFAULT_CONFIG

        # Protects "&key=value" query fragments while entities get decoded
        self._marker = secrets.token_hex(16)

        self._never_allowed_regex = [
            re.compile(pattern, re.IGNORECASE | re.DOTALL)
            for pattern in self.config.never_allowed_regex
        ]
        self._exploded_words = [
            re.compile(
                "(" + r"\s*".join(re.escape(char) for char in word) + r")(\W)",
                re.IGNORECASE | re.DOTALL,
            )
            for word in self.config.exploded_words
        ]
        self._naughty_tags = frozenset(tag.lower() for tag in self.config.naughty_tags)
        self._evil_attribute = re.compile(
            "(?:" + "|".join(self.config.evil_attributes) + ")", re.IGNORECASE
        )

        functions = "|".join(re.escape(name) for name in self.config.naughty_functions)
        self._function_call = re.compile(rf"({functions})(\s*)\((.*?)\)", re.IGNORECASE | re.DOTALL)
        self._tagged_call = re.compile(rf"({functions})(\s*)`(.*?)`", re.IGNORECASE | re.DOTALL)

    def sanitize(self, value: Any) -> Any:
        """Sanitize a submitted value.

        Args:
            value: A string, or a list/tuple/dict of values (sanitized recursively).
                Bytes are decoded with the configured charset; any other scalar is
                returned untouched.

        Returns:
            A value of the same shape with every string sanitized
        """
        if isinstance(value, list):
            return [self.sanitize(item) for item in value]
        if isinstance(value, tuple):
            return tuple(self.sanitize(item) for item in value)
        if isinstance(value, dict):
            return {key: self.sanitize(item) for key, item in value.items()}
        if isinstance(value, (bytes, bytearray)):
            value = bytes(value).decode(self.config.charset, errors="replace")
        if not isinstance(value, str):
            return value

        return self.clean(value)

    def clean(self, text: str) -> str:
        """Run the pipeline until its output stops changing."""
        result = text
        for _ in range(self.config.max_iterations):
            cleaned = self.clean_once(result)
            if cleaned == result:
                if cleaned != text:
                    logger.debug(f"Sanitized value: {len(text)} -> {len(cleaned)} characters")
                return cleaned
            result = cleaned

        logger.warning("Sanitizer did not settle within the iteration cap, returning last pass")
        return result

    def clean_once(self, text: str) -> str:
        """Apply every stage of the pipeline once."""
        text = self._remove_invisible_characters(text)

        # Just in case stuff like <a href="http://%77%77%77%2E%67%6F%6F%67%6C%65%2E%63%6F%6D">
        # is submitted; unquote() leaves plus signs alone
        if "%" in text:
            text = self._url_decode(text)

        # Only entities within tags pose a problem, convert those so the tests below work
        text = ATTRIBUTE_VALUE_PATTERN.sub(self._convert_attribute, text)
        text = TAG_TAIL_PATTERN.sub(self._decode_entity, text)

        text = self._remove_invisible_characters(text)

        # ja<TAB>vascript; spaces between characters are dealt with below
        text = text.replace("\t", " ")

        text = self._do_never_allowed(text)

        # Makes server tags safe (<?xml is caught too, which is harmless)
        text = text.replace("<?", "&lt;?").replace("?>", "?&gt;")

        # j a v a s c r i p t -> javascript, only when followed by a non-word
        # character so that "dealer to" does not become "dealerto"
        for pattern in self._exploded_words:
            text = pattern.sub(self._compact_exploded_words, text)

        text = self._remove_js_from_links(text)

        for _ in range(self.config.max_iterations):
            previous = text
            text = self._sanitize_tags(text)
            if text == previous:
                break
        else:
            logger.warning("Tag sanitization did not settle within the iteration cap")

        # eval('some code') -> eval&#40;'some code'&#41;
        text = self._function_call.sub(r"\1\2&#40;\3&#41;", text)
        text = self._tagged_call.sub(r"\1\2&#96;\3&#96;", text)

        # Final clean up in case something got through the above filters
        return self._do_never_allowed(text)

    def _remove_invisible_characters(self, text: str, url_encoded: bool = True) -> str:
        """Remove control characters such as Java\\0script, raw or percent-encoded."""
        for _ in range(self.config.max_iterations):
            count = 0
            if url_encoded:
                for pattern in INVISIBLE_ENCODED_PATTERNS:
                    text, removed = pattern.subn("", text)
                    count += removed
            text, removed = INVISIBLE_PATTERN.subn("", text)
            count += removed
            if not count:
                break
        return text

    def _url_decode(self, text: str) -> str:
        for _ in range(self.config.max_iterations):
            previous = text
            text = unquote(text, encoding=self.config.charset, errors="replace")
            text = PERCENT_SPACED_PATTERN.sub(self._url_decode_spaces, text)
            text = self._remove_invisible_characters(text)
            if text == previous:
                break
        else:
            logger.warning("URL decoding did not settle within the iteration cap")
        return text

    def _url_decode_spaces(self, match: re.Match) -> str:
        """Decode "% 3 C"-style sequences that hide whitespace inside the escape."""
        encoded = match.group(0)
        compact = WHITESPACE_PATTERN.sub("", encoded)
        if compact == encoded:
            return encoded
        return unquote(compact, encoding=self.config.charset, errors="replace")

    def _convert_attribute(self, match: re.Match) -> str:
        return match.group(0).replace(">", "&gt;").replace("<", "&lt;").replace("\\", "&#92;")

    def _decode_entity(self, match: re.Match) -> str:
        # Protect GET variables in URLs, decode, then restore them
        text = QUERY_PAIR_PATTERN.sub(self._marker + r"\1=\2", match.group(0))
        return self._entity_decode(text).replace(self._marker, "&")

    def _entity_decode(self, text: str) -> str:
        """Decode named and numeric entities, including those missing a trailing ';'."""
        if "&" not in text:
            return text

        for _ in range(self.config.max_iterations):
            previous = text
            text = NAMED_ENTITY_PATTERN.sub(self._decode_named_entity, text)
            text = html.unescape(NUMERIC_ENTITY_PATTERN.sub(r"\1;", text))
            if text == previous:
                break
        return text

    def _decode_named_entity(self, match: re.Match) -> str:
        entity = match.group(0)
        return ENTITY_TABLE.get(entity[1:].lower(), entity)

    def _do_never_allowed(self, text: str) -> str:
        for literal, replacement in self.config.never_allowed_str:
            text = text.replace(literal, replacement)
        for pattern in self._never_allowed_regex:
            text = pattern.sub(lambda _: self.config.removed, text)
        return text

    def _compact_exploded_words(self, match: re.Match) -> str:
        return WHITESPACE_PATTERN.sub("", match.group(1)) + match.group(2)

    def _remove_js_from_links(self, text: str) -> str:
        """Strip scripting from <a>/<img> attributes and drop <script>/<xss> tags.

        Repeated until nothing changes, to catch attacks layered inside each other.
        """
        for _ in range(self.config.max_iterations):
            original = text

            if re.search(r"<a", text, re.IGNORECASE):
                text = LINK_TAG_PATTERN.sub(self._js_link_removal, text)

            if re.search(r"<img", text, re.IGNORECASE):
                text = IMG_TAG_PATTERN.sub(self._js_img_removal, text)

            if re.search(r"script|xss", text, re.IGNORECASE):
                text = SCRIPT_TAG_PATTERN.sub(lambda _: self.config.removed, text)

            if text == original:
                break
        else:
            logger.warning("Link sanitization did not settle within the iteration cap")

        return text

    def _js_link_removal(self, match: re.Match) -> str:
        return self._strip_attribute(match, LINK_HREF_PATTERN)

    def _js_img_removal(self, match: re.Match) -> str:
        return self._strip_attribute(match, IMG_SRC_PATTERN)

    def _strip_attribute(self, match: re.Match, pattern: re.Pattern) -> str:
        attributes = match.group(1)
        if not attributes:
            return match.group(0)
        cleaned = pattern.sub("", self._filter_attributes(attributes))
        return match.group(0).replace(attributes, cleaned)

    def _filter_attributes(self, text: str) -> str:
        """Keep only quoted name="value" pairs, with CSS comments removed."""
        return "".join(
            CSS_COMMENT_PATTERN.sub("", attribute.group(0))
            for attribute in QUOTED_ATTRIBUTE_PATTERN.finditer(text)
        )

    def _sanitize_tags(self, text: str) -> str:
        """Escape stray and unclosed tags, filter the attributes of the rest.

        An unclosed tag runs to the end of the text, so every "<" from there on
        is escaped in the same sweep.
        """
        text = STRAY_OPEN_BRACKET_PATTERN.sub("&lt;", text)

        pieces = []
        position = 0
        for match in TAG_PATTERN.finditer(text):
            pieces.append(text[position:match.start()])
            if not match.group("close_tag"):
                pieces.append(text[match.start():].replace("<", "&lt;"))
                return "".join(pieces)

            pieces.append(self._sanitize_naughty_html(match))
            position = match.end()

        pieces.append(text[position:])
        return "".join(pieces)

    def _sanitize_naughty_html(self, match: re.Match) -> str:
        inner = match.group(1)

        tag_name = match.group("tag_name")
        if tag_name is None or tag_name.lower() in self._naughty_tags:
            return "&lt;" + inner + "&gt;"

        attributes = match.group("attributes") or ""
        kept = []
        while attributes:
            # Browsers often parse non-alpha characters in front of an attribute loosely
            attributes = LEADING_NON_ALPHA_PATTERN.sub("", attributes)

            attribute = ATTRIBUTE_PATTERN.search(attributes)
            if attribute is None:
                # No (valid) attribute left, discard everything else inside the tag
                break

            if self._evil_attribute.fullmatch(attribute.group("name")) or not attribute.group(
                "value"
            ).strip():
                kept.append("xss=removed")
            else:
                kept.append(attribute.group(0))

            attributes = attributes[attribute.end():]

        rendered = " " + " ".join(kept) if kept else ""
        return "<" + match.group("slash") + tag_name + rendered + ">"


@lru_cache()
def get_sanitizer() -> XSSSanitizer:
    """Shared sanitizer configured from the environment."""
    config = DEFAULT_CONFIG.with_overrides(
        charset=get_charset(), max_iterations=get_max_iterations()
    )
    return XSSSanitizer(config)


def sanitize(value: Any) -> Any:
    """Sanitize ``value`` with the shared sanitizer."""
    return get_sanitizer().sanitize(value)
