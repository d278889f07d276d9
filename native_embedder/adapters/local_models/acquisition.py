"""Model acquisition with a single mirror fallback.

Some clients cannot reach the Hugging Face Hub (IP blocks, VPNs, corporate
proxies). When the Hub download fails, acquisition retries exactly once
against a static mirror before giving up. The fallback is deliberately not
recursive.
"""

import logging
from collections.abc import Callable
from pathlib import Path

import httpx
from tqdm.auto import tqdm

from native_embedder.adapters.local_models.mirror_download import download_from_mirror
from native_embedder.adapters.local_models.registry import (
    is_model_downloaded,
    mark_model_downloaded,
    mirror_cache_path,
    model_cache_path,
)
from native_embedder.adapters.local_models.sentence_transformer_pipeline import (
    SentenceTransformerPipeline,
)
from native_embedder.domain.config import DEFAULT_FALLBACK_HOST
from native_embedder.domain.exceptions import ModelAcquisitionError
from native_embedder.domain.models import ModelDescriptor
from native_embedder.ports.inference import InferenceCapability

logger = logging.getLogger(__name__)

PipelineFactory = Callable[..., SentenceTransformerPipeline]


class _LoggingTqdm(tqdm):
    """tqdm that reports progress through logging instead of drawing a bar."""

    log_step = 10

    def display(self, msg=None, pos=None):
        if not self.total:
            return True
        percent = int(self.n * 100 / self.total)
        last = getattr(self, "_last_logged_percent", None)
        if last is None or percent >= last + self.log_step or (percent == 100 != last):
            self._last_logged_percent = percent
            logger.info("Downloading model: %s %d%%", self.desc or "files", percent)
        return True


class ModelAcquisitionClient:
    """Obtains a ready-to-use inference capability for a model.

    The primary source is the Hugging Face Hub; the fallback is a static
    mirror reached over plain HTTP.

    Args:
        fallback_host: Mirror base URL used after a primary failure.
        device: Device passed to the inference pipeline.
        encode_batch_size: Encode batch size passed to the inference pipeline.
        timeout: Network timeout for mirror downloads, in seconds.
        http_client: Optional HTTP client for mirror downloads.
        pipeline_factory: Builds the inference capability for a model directory.
    """

    def __init__(
        self,
        fallback_host: str = DEFAULT_FALLBACK_HOST,
        device: str | None = None,
        encode_batch_size: int = SentenceTransformerPipeline.DEFAULT_ENCODE_BATCH_SIZE,
        timeout: float = 60.0,
        http_client: httpx.Client | None = None,
        pipeline_factory: PipelineFactory = SentenceTransformerPipeline,
    ) -> None:
        self._fallback_host = fallback_host
        self._device = device
        self._encode_batch_size = encode_batch_size
        self._timeout = timeout
        self._http_client = http_client
        self._pipeline_factory = pipeline_factory

    @property
    def fallback_host(self) -> str:
        """Mirror used after a primary failure."""
        return self._fallback_host

    def acquire(
        self,
        descriptor: ModelDescriptor,
        cache_dir: Path,
        already_downloaded: bool,
        host_override: str | None = None,
    ) -> InferenceCapability:
        """Obtain an inference capability, falling back to the mirror once.

        Args:
            descriptor: Model to acquire.
            cache_dir: Model cache root. Hub files go to <cache_dir>/<model id
                path>, mirror files to <cache_dir>/mirror/<mirror id path>.
            already_downloaded: Whether a complete copy is cached; suppresses
                mirror download progress. Each source still downloads only
                when its own copy lacks the completion marker.
            host_override: Fetch from this mirror instead of the Hub. No
                fallback is attempted when an override is given.

        Returns:
            Loaded inference capability.

        Raises:
            ModelAcquisitionError: If every attempted source failed. Carries
                the error from the last attempt.
        """
        try:
            return self._fetch_with_host(
                descriptor, cache_dir, already_downloaded, host_override
            )
        except Exception as e:
            if host_override is not None:
                raise ModelAcquisitionError(descriptor.identifier, e) from e
            logger.warning(
                "Failed to download model from primary source: %s. Using fallback %s",
                e,
                self._fallback_host,
            )

        try:
            return self._fetch_with_host(
                descriptor, cache_dir, already_downloaded, self._fallback_host
            )
        except Exception as e:
            raise ModelAcquisitionError(descriptor.identifier, e) from e

    def _fetch_with_host(
        self,
        descriptor: ModelDescriptor,
        cache_dir: Path,
        already_downloaded: bool,
        host_override: str | None,
    ) -> InferenceCapability:
        if host_override is None:
            model_dir = model_cache_path(descriptor, cache_dir)
            backend = "torch"
            if not is_model_downloaded(model_dir):
                self._download_from_hub(descriptor, model_dir)
                mark_model_downloaded(model_dir)
        else:
            model_dir = mirror_cache_path(descriptor, cache_dir)
            backend = "onnx"
            if not is_model_downloaded(model_dir):
                logger.info("Downloading %s from %s", descriptor.mirror_source, host_override)
                download_from_mirror(
                    descriptor,
                    model_dir,
                    host_override,
                    client=self._http_client,
                    timeout=self._timeout,
                    show_progress=not already_downloaded,
                )
                mark_model_downloaded(model_dir)

        pipeline = self._pipeline_factory(
            descriptor,
            model_dir,
            device=self._device,
            encode_batch_size=self._encode_batch_size,
            backend=backend,
        )
        pipeline.load()
        return pipeline

    def _download_from_hub(self, descriptor: ModelDescriptor, model_dir: Path) -> None:
        # Import here to keep CLI startup fast
        from huggingface_hub import constants, snapshot_download

        logger.info("Downloading %s from %s", descriptor.identifier, constants.ENDPOINT)
        snapshot_download(
            repo_id=descriptor.identifier,
            local_dir=model_dir,
            allow_patterns=descriptor.hub_allow_patterns,
            tqdm_class=_LoggingTqdm,
        )

        # Custom code referenced from another repository is resolved through
        # the Hugging Face cache when the model is loaded offline
        for code_repo in descriptor.remote_code_repos:
            logger.info("Downloading modeling code from %s", code_repo)
            snapshot_download(
                repo_id=code_repo,
                allow_patterns=["*.py"],
                tqdm_class=_LoggingTqdm,
            )
