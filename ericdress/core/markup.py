import logging
import re
from html.parser import HTMLParser

from .errors import MarkupParseError
from .models import ImageMarkup, PlainText

logger = logging.getLogger(__name__)

# The whole candidate has to be one tag, "<img> in a sentence" stays text.
IMG_TAG_PATTERN = re.compile(r"<img\b.*>", re.IGNORECASE)


class _SingleImageTagParser(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.attrs: dict[str, str | None] | None = None
        self.unexpected: list[str] = []

    def handle_starttag(self, tag, attrs):
        if tag != "img" or self.attrs is not None:
            self.unexpected.append(f"<{tag}>")
            return
        self.attrs = dict(attrs)

    def handle_endtag(self, tag):
        # <img/> reports a closing tag for the void element itself.
        if tag != "img":
            self.unexpected.append(f"</{tag}>")

    def handle_data(self, data):
        if data.strip():
            self.unexpected.append(repr(data.strip()))

    def handle_comment(self, data):
        self.unexpected.append(f"<!--{data}-->")

    def handle_decl(self, decl):
        self.unexpected.append(f"<!{decl}>")

    def handle_pi(self, data):
        self.unexpected.append(f"<?{data}>")

    def unknown_decl(self, data):
        self.unexpected.append(f"<![{data}]>")


def is_image_markup(text: str) -> bool:
    return IMG_TAG_PATTERN.fullmatch(text) is not None


def parse_image_tag(text: str) -> ImageMarkup:
    parser = _SingleImageTagParser()
    try:
        parser.feed(text)
        parser.close()
    except Exception as e:
        # html.parser asserts on some malformed declarations.
        raise MarkupParseError(f"unparsable markup: {e}") from e

    if parser.attrs is None:
        raise MarkupParseError("no complete <img> tag found")
    if parser.unexpected:
        raise MarkupParseError(f"unexpected content around <img>: {', '.join(parser.unexpected)}")

    src = (parser.attrs.get("src") or "").strip()
    if not src:
        raise MarkupParseError("<img> tag has no src")

    return ImageMarkup(src=src, alt=parser.attrs.get("alt") or "")


def classify(text: str, log: logging.Logger | None = None) -> PlainText | ImageMarkup:
    if not is_image_markup(text):
        return PlainText(text)

    try:
        return parse_image_tag(text)
    except MarkupParseError as e:
        (log or logger).warning(f"Failed to parse img html \"{text}\": {e}. Sending it as text.")
        return PlainText(text)
