"""Domain exceptions for the native embedder.

These exceptions represent failures the caller of an embedding request has to
deal with. They are caught at the application boundary (CLI) and converted to
user-facing error messages.
"""


class NativeEmbedderError(Exception):
    """Base exception for all embedder errors.

    Attributes:
        message: User-facing error message.
        hint: Optional actionable suggestion.
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class ModelAcquisitionError(NativeEmbedderError):
    """Raised when a model could not be obtained from any source.

    Attributes:
        model_id: Identifier of the model that failed to load.
        cause: The last underlying error (from the final attempt).
    """

    def __init__(self, model_id: str, cause: BaseException) -> None:
        super().__init__(
            f"Failed to acquire embedding model {model_id}: {cause}",
            hint="Check network access to huggingface.co or pre-download the model "
            "with 'native-embedder download'",
        )
        self.model_id = model_id
        self.cause = cause


class ScratchFileCorruptError(NativeEmbedderError):
    """Raised when the scratch file cannot be parsed back into embeddings."""

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(
            f"Embedding scratch file {path} is not valid JSON: {cause}",
            hint="A write to the storage directory probably failed; check disk space",
        )
        self.path = path
        self.cause = cause
