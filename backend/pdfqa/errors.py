"""Error taxonomy for the retrieval pipeline.

Every failure surfaced to the pipeline's caller is a subclass of PdfQAError
carrying a human-readable cause. None of these are retried inside the core.
"""


class PdfQAError(Exception):
    """Base class for all pipeline errors."""

    pass


class DocumentLoadError(PdfQAError):
    """Source document is unreadable, corrupt, or of an unsupported type."""

    pass


class ConfigurationError(PdfQAError):
    """Invalid chunking configuration (e.g. overlap >= chunk size)."""

    pass


class EmbeddingProviderError(PdfQAError):
    """External embedding call failed (transport, quota, auth, bad shape)."""

    pass


class AnswerGeneratorError(PdfQAError):
    """External answer-generation call failed."""

    pass


class DimensionMismatchError(PdfQAError):
    """Vector length does not match the store's dimensionality.

    This is a programming-contract violation, not a user-facing condition.
    """

    pass


class NotFoundError(PdfQAError):
    """Referenced document does not exist in the store."""

    pass
