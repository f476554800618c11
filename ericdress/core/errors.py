class EricDressError(Exception):
    pass


# --- STARTUP ERRORS ---
class ConfigurationError(EricDressError):
    pass


class TextPoolNotFoundError(ConfigurationError, FileNotFoundError):
    pass


class ParseError(ConfigurationError):
    pass


# --- REQUEST-TIME ERRORS ---
class MarkupParseError(EricDressError, ValueError):
    pass


class DeliveryError(EricDressError):
    def __init__(self, message: str, expected: bool = False):
        super().__init__(message)
        # Entity parse failures and expired queries are routine, anything else is not.
        self.expected = expected
