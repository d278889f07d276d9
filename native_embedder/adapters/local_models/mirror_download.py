"""Plain-HTTP model download from a static mirror.

The mirror serves each model's files flat under <host><mirror id>/ without the
Hugging Face revision layout, in the transformers.js (Xenova) layout with a
quantized ONNX export. Files are listed up front by the model descriptor and
streamed one by one.
"""

import logging
from pathlib import Path

import httpx

from native_embedder.domain.models import ModelDescriptor

logger = logging.getLogger(__name__)

# Remote path template on the mirror; the Hub's is "{model}/resolve/{revision}/"
MIRROR_PATH_TEMPLATE = "{model}/"

STREAM_CHUNK_BYTES = 1 << 20
PROGRESS_PERCENT_STEP = 10


def mirror_file_url(host: str, model_id: str, filename: str) -> str:
    """Build the URL of one model file on the mirror."""
    if not host.endswith("/"):
        host += "/"
    return host + MIRROR_PATH_TEMPLATE.format(model=model_id) + filename


def _stream_to_file(
    client: httpx.Client,
    url: str,
    destination: Path,
    filename: str,
    show_progress: bool,
) -> int:
    part_path = destination.with_name(destination.name + ".part")
    part_path.parent.mkdir(parents=True, exist_ok=True)
    bytes_downloaded = 0
    next_percent = PROGRESS_PERCENT_STEP

    try:
        with client.stream("GET", url) as response:
            response.raise_for_status()
            total = int(response.headers.get("Content-Length") or 0)
            with part_path.open("wb") as stream:
                for chunk in response.iter_bytes(STREAM_CHUNK_BYTES):
                    stream.write(chunk)
                    bytes_downloaded += len(chunk)
                    if show_progress and total:
                        percent = bytes_downloaded * 100 // total
                        if percent >= next_percent:
                            logger.info("Downloading model: %s %d%%", filename, percent)
                            next_percent = percent - percent % PROGRESS_PERCENT_STEP
                            next_percent += PROGRESS_PERCENT_STEP
        part_path.replace(destination)
    except BaseException:
        part_path.unlink(missing_ok=True)
        raise

    return bytes_downloaded


def download_from_mirror(
    descriptor: ModelDescriptor,
    model_dir: Path,
    host: str,
    client: httpx.Client | None = None,
    timeout: float = 60.0,
    show_progress: bool = True,
) -> Path:
    """Download every file of a model from the mirror into model_dir.

    Args:
        descriptor: Model to download; its mirror_files lists what to fetch
            from <host><mirror_source>/.
        model_dir: Destination directory (created if missing).
        host: Mirror base URL.
        client: HTTP client to use. A short-lived client is created if None.
        timeout: Network timeout in seconds when creating the client.
        show_progress: Log per-file download percentages.

    Returns:
        model_dir, populated with the model files.

    Raises:
        httpx.HTTPError: If any file cannot be fetched.
        OSError: If a file cannot be written.
    """
    owns_client = client is None
    if client is None:
        client = httpx.Client(follow_redirects=True, timeout=timeout)

    try:
        total_bytes = 0
        for filename in descriptor.mirror_files:
            url = mirror_file_url(host, descriptor.mirror_source, filename)
            logger.debug("Fetching %s", url)
            total_bytes += _stream_to_file(
                client, url, model_dir / filename, filename, show_progress
            )
    finally:
        if owns_client:
            client.close()

    logger.info(
        "Downloaded %s from mirror (%d files, %.1f MB)",
        descriptor.mirror_source,
        len(descriptor.mirror_files),
        total_bytes / (1 << 20),
    )
    return model_dir
