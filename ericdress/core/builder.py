import logging
import time
from typing import Callable

from .formatting import TemplateFormatter
from .markup import classify
from .models import ArticleReply, ContentPools, ImageMarkup, InlineResult, PhotoReply, Reply, Sender
from .utils import RandomSource, pick, random_id

logger = logging.getLogger(__name__)

ERROR_TITLE = "error!"


class ResponseBuilder:
    def __init__(
        self,
        pools: ContentPools,
        formatter: TemplateFormatter,
        rng: RandomSource,
        clock: Callable[[], float] = time.time,
        log: logging.Logger | None = None,
    ):
        self.pools = pools
        self._formatter = formatter
        self._rng = rng
        self._clock = clock
        self._log = log or logger

    def new_id(self) -> str:
        return random_id(self._rng, self._clock)

    # --- REPLIES ---
    def build_reply(self, sender: Sender) -> Reply:
        candidate = pick(self.pools.contents, self._rng)
        verdict = classify(candidate, self._log)

        if isinstance(verdict, ImageMarkup):
            # Captions are never wrapped.
            caption = self._formatter.format(verdict.alt, sender, allow_wrap=False)
            return PhotoReply(url=verdict.src, caption=caption, candidate=candidate)

        return ArticleReply(text=self._formatter.format(candidate, sender), candidate=candidate)

    def build_inline_result(self, sender: Sender) -> InlineResult:
        return InlineResult(
            id=self.new_id(),
            title=pick(self.pools.titles, self._rng),
            thumbnail_url=pick(self.pools.thumb_urls, self._rng),
            reply=self.build_reply(sender),
        )

    # --- ERROR FALLBACK ---
    def build_error_text(self) -> str:
        return pick(self.pools.errors, self._rng)

    def build_error_result(self) -> InlineResult:
        text = self.build_error_text()
        return InlineResult(
            id=self.new_id(),
            title=ERROR_TITLE,
            description=ERROR_TITLE,
            reply=ArticleReply(text=text, parse_mode=None, candidate=text),
        )
