"""Domain models describing supported embedding models.

A ModelDescriptor captures everything the embedder needs to know about a
model before it is loaded: prompt prefixes, batching limits, display metadata
and the file manifests used when fetching from the Hub or the fallback mirror.
"""

from dataclasses import dataclass

# Files a sentence-transformers checkpoint needs to be loaded from disk.
SENTENCE_TRANSFORMER_FILES: tuple[str, ...] = (
    "config.json",
    "config_sentence_transformers.json",
    "modules.json",
    "sentence_bert_config.json",
    "special_tokens_map.json",
    "tokenizer.json",
    "tokenizer_config.json",
    "vocab.txt",
    "model.safetensors",
    "1_Pooling/config.json",
)

# Quantized ONNX export as published in the transformers.js (Xenova) layout.
ONNX_MODEL_FILE = "onnx/model_quantized.onnx"

ONNX_MIRROR_FILES: tuple[str, ...] = (
    "config.json",
    "tokenizer.json",
    "tokenizer_config.json",
    ONNX_MODEL_FILE,
)


@dataclass(frozen=True)
class ModelCard:
    """Human-readable metadata for a model.

    Attributes:
        name: Display name
        description: Short description of what the model is good at
        language: Language coverage (e.g., "English", "Multilingual")
        size: Approximate download size (e.g., "23MB")
        reference_url: Link to the upstream model card
    """

    name: str
    description: str
    language: str
    size: str
    reference_url: str


@dataclass(frozen=True)
class ModelDescriptor:
    """Operating parameters for one supported embedding model.

    Attributes:
        identifier: Hugging Face repository ID (e.g., "intfloat/multilingual-e5-small")
        card: Display metadata
        max_concurrent_chunks: Maximum number of texts embedded in one inference call
        embedding_max_chunk_length: Maximum characters per chunk the model handles well
        chunk_prefix: Prefix prepended to document chunks before embedding
        query_prefix: Prefix prepended to search queries before embedding
        trust_remote_code: Whether the checkpoint ships custom modeling code
        remote_code_repos: Other Hub repositories the custom code is loaded from
        hub_files: Files fetched from the Hub for this model
        mirror_id: Model ID on the fallback mirror (defaults to identifier)
        mirror_files: Files fetched from the fallback mirror for this model

    Raises:
        ValueError: If identifier is empty, a limit is not positive or a
            file manifest is empty.
    """

    identifier: str
    card: ModelCard
    max_concurrent_chunks: int
    embedding_max_chunk_length: int
    chunk_prefix: str = ""
    query_prefix: str = ""
    trust_remote_code: bool = False
    remote_code_repos: tuple[str, ...] = ()
    hub_files: tuple[str, ...] = SENTENCE_TRANSFORMER_FILES
    mirror_id: str = ""
    mirror_files: tuple[str, ...] = ONNX_MIRROR_FILES

    def __post_init__(self) -> None:
        """Validate descriptor after initialization."""
        if not self.identifier:
            raise ValueError("Model identifier cannot be empty")
        if self.max_concurrent_chunks <= 0:
            raise ValueError(
                f"max_concurrent_chunks must be positive, got {self.max_concurrent_chunks}"
            )
        if self.embedding_max_chunk_length <= 0:
            raise ValueError(
                f"embedding_max_chunk_length must be positive, "
                f"got {self.embedding_max_chunk_length}"
            )
        if not self.hub_files:
            raise ValueError(f"Model {self.identifier} has no hub files")
        if not self.mirror_files:
            raise ValueError(f"Model {self.identifier} has no mirror files")

    @property
    def mirror_source(self) -> str:
        """Model ID used to build fallback mirror URLs."""
        return self.mirror_id or self.identifier

    @property
    def hub_allow_patterns(self) -> list[str]:
        """File patterns requested from the Hub (custom code included)."""
        patterns = list(self.hub_files)
        if self.trust_remote_code:
            patterns.append("*.py")
        return patterns

    def to_api_info(self) -> dict[str, str]:
        """Flatten to the dictionary shape returned by list_supported_models()."""
        return {
            "id": self.identifier,
            "name": self.card.name,
            "description": self.card.description,
            "language": self.card.language,
            "size": self.card.size,
            "reference_url": self.card.reference_url,
        }
