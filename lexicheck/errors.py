"""Error types raised by the lexicon validators.

Every validator reports failure by raising one of the three subclasses of
:class:`LexiconError`. The rendered message carries a stable prefix per kind
so callers that only print errors still get a recognisable category.
"""


class LexiconError(Exception):
    """Base class for all lexicon validation failures.

    Attributes:
        message: Human-readable error description, usually prefixed with
            the location of the failure (``path: detail``).
    """

    kind = "lexicon_error"
    prefix = ""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"{self.prefix}{message}")


class InvalidSchemaError(LexiconError):
    """The lexicon schema document itself is malformed."""

    kind = "invalid_schema"
    prefix = "Invalid lexicon schema: "


class DataValidationError(LexiconError):
    """A data value does not conform to an otherwise valid schema."""

    kind = "data_validation"
    prefix = "Data validation failed: "


class LexiconNotFoundError(LexiconError):
    """A requested lexicon document id is absent from the catalog."""

    kind = "lexicon_not_found"
    prefix = "Lexicon not found for collection: "
