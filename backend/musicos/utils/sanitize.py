"""
Allowlist HTML sanitizing built on the standard library HTML parser.

``sanitize`` keeps only text (all markup removed, script/style bodies dropped,
the rest HTML-escaped) and is what form fields go through before they are
stored. An unterminated trailing tag is dropped, not kept as text.
``sanitize_html`` keeps a tiny set of formatting tags for rich text that is
rendered as HTML.
"""
from html import escape
from html.parser import HTMLParser
from typing import Any, Dict, FrozenSet, List, Optional

ALLOWED_TAGS: FrozenSet[str] = frozenset({"b", "i", "em", "strong", "p", "br", "a"})
ALLOWED_ATTRS: Dict[str, FrozenSet[str]] = {"a": frozenset({"href", "target"})}
VOID_TAGS = frozenset({"br"})
DROP_CONTENT_TAGS = frozenset({"script", "style", "iframe", "object", "embed", "template"})
SAFE_URL_SCHEMES = ("http:", "https:", "mailto:", "/", "#")


def _safe_url(value: str) -> bool:
    # browsers ignore whitespace and control chars inside the scheme
    compact = "".join(ch for ch in value if ch > " ").lower()
    return compact.startswith(SAFE_URL_SCHEMES) or ":" not in compact


class _AllowlistParser(HTMLParser):
    def __init__(self, allowed_tags: FrozenSet[str]):
        super().__init__(convert_charrefs=False)
        self.allowed_tags = allowed_tags
        self.out: List[str] = []
        self.open_tags: List[str] = []
        self.skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in DROP_CONTENT_TAGS:
            self.skip_depth += 1
            return
        if self.skip_depth or tag not in self.allowed_tags:
            return
        kept = []
        for name, value in attrs:
            if name not in ALLOWED_ATTRS.get(tag, ()):
                continue
            if value is None:
                continue
            if name == "href" and not _safe_url(value):
                continue
            kept.append(f' {name}="{escape(value, quote=True)}"')
        self.out.append(f"<{tag}{''.join(kept)}>")
        if tag not in VOID_TAGS:
            self.open_tags.append(tag)

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)
        if tag in DROP_CONTENT_TAGS:
            self.skip_depth -= 1

    def handle_endtag(self, tag):
        if tag in DROP_CONTENT_TAGS:
            self.skip_depth = max(0, self.skip_depth - 1)
            return
        if self.skip_depth or tag not in self.open_tags:
            return
        # close everything opened after the matching tag as well
        while self.open_tags:
            last = self.open_tags.pop()
            self.out.append(f"</{last}>")
            if last == tag:
                break

    def handle_data(self, data):
        if not self.skip_depth:
            self.out.append(escape(data, quote=False))

    def handle_entityref(self, name):
        if not self.skip_depth:
            self.out.append(f"&{name};")

    def handle_charref(self, name):
        if not self.skip_depth:
            self.out.append(f"&#{name};")

    def result(self) -> str:
        # close() would hand an unterminated tag back as text
        if self.rawdata.lstrip().startswith("<"):
            self.rawdata = ""
        self.close()
        while self.open_tags:
            self.out.append(f"</{self.open_tags.pop()}>")
        return "".join(self.out)


def _run(value: str, allowed_tags: FrozenSet[str]) -> str:
    parser = _AllowlistParser(allowed_tags)
    parser.feed(value)
    return parser.result().strip()


def sanitize(value: Any) -> Any:
    """Plain text: every tag removed. Non-strings are returned unchanged."""
    if not isinstance(value, str):
        return value
    return _run(value, frozenset())


def sanitize_html(value: Optional[str]) -> str:
    if not value:
        return ""
    return _run(value, ALLOWED_TAGS)


def sanitize_mapping(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: sanitize(val) for key, val in values.items()}
