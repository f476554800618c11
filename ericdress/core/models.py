from dataclasses import dataclass, field
from typing import Sequence, Union

from telegram import User
from telegram.constants import ParseMode

CATEGORIES = ("title", "thumb_url", "content", "wrap", "error")


# --- TEXT SOURCES ---
@dataclass(frozen=True)
class LiteralSource:
    text: str


@dataclass(frozen=True)
class ListSource:
    items: Sequence[str]


@dataclass(frozen=True)
class FileSource:
    path: str
    parsemode: str = "text"


TextSource = Union[LiteralSource, ListSource, FileSource]


@dataclass(frozen=True)
class ContentPools:
    titles: tuple[str, ...]
    thumb_urls: tuple[str, ...]
    contents: tuple[str, ...]
    wraps: tuple[str, ...]
    errors: tuple[str, ...]


# --- SENDER ---
@dataclass(frozen=True)
class Sender:
    id: int
    first_name: str
    last_name: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "Sender":
        return cls(id=user.id, first_name=user.first_name or "", last_name=user.last_name)


# --- CLASSIFIER VERDICTS ---
@dataclass(frozen=True)
class PlainText:
    text: str


@dataclass(frozen=True)
class ImageMarkup:
    src: str
    alt: str = ""


# --- REPLY PAYLOADS ---
@dataclass(frozen=True)
class ArticleReply:
    text: str
    parse_mode: str | None = ParseMode.HTML
    candidate: str = field(default="", compare=False)


@dataclass(frozen=True)
class PhotoReply:
    url: str
    caption: str
    parse_mode: str | None = ParseMode.HTML
    candidate: str = field(default="", compare=False)


Reply = Union[ArticleReply, PhotoReply]


@dataclass(frozen=True)
class InlineResult:
    id: str
    title: str
    reply: Reply
    thumbnail_url: str | None = None
    description: str | None = None
