"""Attack-vector vocabulary used by the XSS sanitizer."""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from formguard.config import DEFAULT_CHARSET, DEFAULT_MAX_ITERATIONS

REMOVED = "[removed]"

# Literal substrings and what they are replaced with, applied in order
NEVER_ALLOWED_STR = (
    ("document.cookie", REMOVED),
    ("(document).cookie", REMOVED),
    ("document.write", REMOVED),
    ("(document).write", REMOVED),
    (".parentNode", REMOVED),
    (".innerHTML", REMOVED),
    ("-moz-binding", REMOVED),
    ("<!--", "&lt;!--"),
    ("-->", "--&gt;"),
    ("<![CDATA[", "&lt;![CDATA["),
    ("<comment>", "&lt;comment&gt;"),
    ("<%", "&lt;&#37;"),
)

# Replaced with REMOVED, matched case-insensitively and across newlines
NEVER_ALLOWED_REGEX = (
    r"javascript\s*:",
    r"(\(?document\)?|\(?window\)?(\.document)?)\.(location|on\w*)",
    r"expression\s*(\(|&#40;)",  # CSS and IE
    r"vbscript\s*:",
    r"wscript\s*:",
    r"jscript\s*:",
    r"vbs\s*:",
    r"Redirect\s+30\d",
    r"([\"'])?data\s*:.*?base64.*?,.*?\1?",
)

NAUGHTY_TAGS = (
    "alert",
    "area",
    "prompt",
    "confirm",
    "applet",
    "audio",
    "basefont",
    "base",
    "behavior",
    "bgsound",
    "blink",
    "body",
    "embed",
    "expression",
    "form",
    "frameset",
    "frame",
    "head",
    "html",
    "ilayer",
    "iframe",
    "input",
    "button",
    "select",
    "isindex",
    "layer",
    "link",
    "meta",
    "keygen",
    "object",
    "plaintext",
    "style",
    "script",
    "textarea",
    "title",
    "math",
    "video",
    "svg",
    "xml",
    "xss",
)

EVIL_ATTRIBUTES = (
    r"on\w+",
    "style",
    "xmlns",
    "formaction",
    "form",
    "xlink:href",
    "FSCommand",
    "seekSegmentTime",
)

# Words an attacker may spell as "j a v a s c r i p t"
EXPLODED_WORDS = (
    "javascript",
    "expression",
    "vbscript",
    "jscript",
    "wscript",
    "vbs",
    "script",
    "base64",
    "applet",
    "alert",
    "document",
    "write",
    "cookie",
    "window",
    "confirm",
    "prompt",
    "eval",
)

NAUGHTY_FUNCTIONS = (
    "alert",
    "prompt",
    "confirm",
    "cmd",
    "passthru",
    "eval",
    "exec",
    "expression",
    "system",
    "fopen",
    "fsockopen",
    "file",
    "file_get_contents",
    "readfile",
    "unlink",
)


@dataclass(frozen=True)
class SanitizerConfig:
    """Read-only configuration of an XSSSanitizer."""

    charset: str = DEFAULT_CHARSET
    never_allowed_str: Tuple[Tuple[str, str], ...] = NEVER_ALLOWED_STR
    never_allowed_regex: Tuple[str, ...] = NEVER_ALLOWED_REGEX
    naughty_tags: Tuple[str, ...] = NAUGHTY_TAGS
    evil_attributes: Tuple[str, ...] = EVIL_ATTRIBUTES
    exploded_words: Tuple[str, ...] = EXPLODED_WORDS
    naughty_functions: Tuple[str, ...] = NAUGHTY_FUNCTIONS
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    removed: str = field(default=REMOVED, repr=False)

    def __post_init__(self):
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")

    def with_overrides(self, charset: Optional[str] = None, max_iterations: Optional[int] = None):
        """Return a copy with the environment-driven settings replaced."""
        changes = {}
        if charset is not None:
            changes["charset"] = charset
        if max_iterations is not None:
            changes["max_iterations"] = max_iterations
        return replace(self, **changes)


DEFAULT_CONFIG = SanitizerConfig()
