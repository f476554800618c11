import logging
from typing import Sequence

from .models import Sender
from .utils import RandomSource, pick, safe_escape

logger = logging.getLogger(__name__)

TEXT_PLACEHOLDER = "{TEXT}"
NAME_PLACEHOLDER = "{NAME}"
DEFAULT_WRAP_PROBABILITY = 0.03


def mention_html(sender: Sender) -> str:
    display_name = f"{sender.first_name} {sender.last_name or ''}".strip()
    return f'<a href="tg://user?id={sender.id}">{safe_escape(display_name)}</a>'


class TemplateFormatter:
    """Fills {TEXT} and {NAME} into a message, now and then inside a wrap template.

    {TEXT} is inserted as-is, pool content is HTML already. Only the
    user's name, which the user controls, is escaped.
    """

    def __init__(
        self,
        wraps: Sequence[str],
        rng: RandomSource,
        wrap_probability: float = DEFAULT_WRAP_PROBABILITY,
        log: logging.Logger | None = None,
    ):
        self._wraps = wraps
        self._rng = rng
        self._wrap_probability = wrap_probability
        self._log = log or logger

    def choose_template(self, allow_wrap: bool = True) -> str:
        if not allow_wrap or not self._wraps:
            return TEXT_PLACEHOLDER
        if self._rng.random() < self._wrap_probability:
            template = pick(self._wraps, self._rng)
            self._log.debug(f"Wrapping message with template: {template}")
            return template
        return TEXT_PLACEHOLDER

    def format(self, text: str, sender: Sender, allow_wrap: bool = True) -> str:
        template = self.choose_template(allow_wrap)
        return template.replace(TEXT_PLACEHOLDER, text).replace(NAME_PLACEHOLDER, mention_html(sender))
