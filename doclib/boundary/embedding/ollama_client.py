"""
Ollama embedding client.

Calls the Ollama HTTP API for embeddings, retries transient failures
with exponential backoff, validates every vector, and embeds batches
through a fixed-size worker pool that preserves input order.

API:
- POST /api/embeddings {"model", "prompt"} -> {"embedding": [...]}
- GET  /api/tags -> {"models": [{"name": ...}]}

Dependencies: httpx, tenacity, doclib.boundary.embedding.validation
System role: Inference service adapter for ingestion and query embedding
"""

import logging
import queue
import threading
from collections.abc import Sequence
from typing import Any

import httpx
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from doclib.boundary.embedding.base import EmbeddingClient
from doclib.boundary.embedding.validation import validate_embedding
from doclib.configs import EmbeddingSettings
from doclib.core.exceptions import EmbeddingError, ValidationError

logger = logging.getLogger(__name__)


def is_transient(exc: BaseException) -> bool:
    """Connection problems, timeouts, 5xx and 429 are worth retrying."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status == 429
    return isinstance(exc, httpx.TransportError)


class OllamaEmbeddingClient(EmbeddingClient):
    """
    Embedding client for a local Ollama server.

    Usage:
        with OllamaEmbeddingClient(model="mxbai-embed-large", dimension=1024) as client:
            client.check_health()
            vectors = client.embed_batch(["first chunk", "second chunk"])
    """

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "mxbai-embed-large",
        dimension: int = 1024,
        timeout: float = 60.0,
        max_attempts: int = 3,
        backoff_base: float = 0.1,
        concurrency: int = 5,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            host: Ollama base URL
            model: Embedding model name
            dimension: Expected vector dimension
            timeout: Per-request timeout in seconds
            max_attempts: Attempts per request, including the first
            backoff_base: First retry delay in seconds, doubled per retry
            concurrency: Default worker count for embed_batch
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.host = host.rstrip("/")
        self.model = model
        self.dimension = dimension
        self.concurrency = concurrency
        self._client = httpx.Client(base_url=self.host, timeout=timeout, transport=transport)
        self._retrying = Retrying(
            retry=retry_if_exception(is_transient),
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=backoff_base),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:embed - Retry {retry_state.attempt_number}/{max_attempts} "
                f"after {type(retry_state.outcome.exception()).__name__}"
            ),
            reraise=True,
        )

    @classmethod
    def from_settings(
        cls,
        settings: EmbeddingSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> "OllamaEmbeddingClient":
        return cls(
            host=settings.host,
            model=settings.model,
            dimension=settings.dimension,
            timeout=settings.timeout,
            max_attempts=settings.max_attempts,
            backoff_base=settings.backoff_base,
            concurrency=settings.concurrency,
            transport=transport,
        )

    def _request_embedding(self, text: str) -> Any:
        response = self._client.post(
            "/api/embeddings",
            json={"model": self.model, "prompt": text},
        )
        response.raise_for_status()
        return response.json()

    def embed(self, text: str) -> list[float]:
        """
        Embed a single text.

        Args:
            text: Text to embed

        Returns:
            list[float]: Validated vector of length dimension

        Raises:
            EmbeddingError: Request failed after retries, bad payload or invalid vector
        """
        details = {"model": self.model, "host": self.host}
        try:
            # Retrying keeps per-call state, so each call gets its own copy
            payload = self._retrying.copy()(self._request_embedding, text)
        except httpx.HTTPStatusError as e:
            raise EmbeddingError(
                f"Embedding request failed with HTTP {e.response.status_code}",
                {**details, "status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise EmbeddingError(
                f"Embedding service unreachable: {type(e).__name__}",
                {**details, "error": str(e)},
            ) from e
        except ValueError as e:
            raise EmbeddingError("Embedding response is not valid JSON", details) from e

        vector = payload.get("embedding") if isinstance(payload, dict) else None
        if not isinstance(vector, list):
            raise EmbeddingError("Embedding response has no embedding field", details)

        try:
            return validate_embedding(vector, self.dimension)
        except ValidationError as e:
            raise EmbeddingError(f"Invalid embedding: {e.message}", {**details, **e.details}) from e

    def embed_batch(self, texts: Sequence[str], concurrency: int | None = None) -> list[list[float]]:
        """
        Embed texts through a bounded worker pool.

        Workers pull (index, text) items from a shared queue and write
        each vector into its slot, so result order matches input order
        regardless of completion order. The first failure stops all
        workers from taking new items.

        Args:
            texts: Texts to embed
            concurrency: Worker count (default: client concurrency)

        Returns:
            list[list[float]]: One vector per text, in input order

        Raises:
            EmbeddingError: First failure encountered; no partial result
        """
        texts = list(texts)
        if not texts:
            return []

        workers = max(1, min(concurrency or self.concurrency, len(texts)))
        work: queue.Queue[tuple[int, str]] = queue.Queue()
        for item in enumerate(texts):
            work.put(item)

        results: list[list[float] | None] = [None] * len(texts)
        failures: list[BaseException] = []
        failure_lock = threading.Lock()
        stop = threading.Event()

        def worker() -> None:
            while not stop.is_set():
                try:
                    index, text = work.get_nowait()
                except queue.Empty:
                    return
                try:
                    results[index] = self.embed(text)
                except Exception as e:
                    with failure_lock:
                        failures.append(e)
                    stop.set()
                    return

        threads = [
            threading.Thread(target=worker, name=f"embed-worker-{n}", daemon=True)
            for n in range(workers)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        if failures:
            first = failures[0]
            logger.error(f"{__name__}:embed_batch - Batch of {len(texts)} aborted: {first}")
            if isinstance(first, EmbeddingError):
                raise first
            raise EmbeddingError(f"Embedding batch failed: {first}", {"model": self.model}) from first

        logger.debug(f"{__name__}:embed_batch - Embedded {len(texts)} texts with {workers} workers")
        return results

    def check_health(self) -> None:
        """
        Verify Ollama is reachable and the model is installed.

        A model matches when an installed name equals it or starts with
        "<model>:" (e.g. "mxbai-embed-large:latest").

        Raises:
            EmbeddingError: Unreachable, non-200, invalid JSON or model missing
        """
        details = {"model": self.model, "host": self.host}
        try:
            response = self._client.get("/api/tags")
        except httpx.HTTPError as e:
            raise EmbeddingError(
                f"Ollama not reachable at {self.host}",
                {**details, "error": str(e)},
            ) from e

        if response.status_code != 200:
            raise EmbeddingError(
                f"Ollama health check failed with HTTP {response.status_code}",
                {**details, "status_code": response.status_code},
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise EmbeddingError("Ollama returned invalid JSON from /api/tags", details) from e

        models = payload.get("models", []) if isinstance(payload, dict) else []
        names = [m.get("name", "") for m in models if isinstance(m, dict)]
        if not any(name == self.model or name.startswith(f"{self.model}:") for name in names):
            raise EmbeddingError(
                f"Model '{self.model}' not found. Pull with: ollama pull {self.model}",
                {**details, "available": names},
            )

    def close(self) -> None:
        self._client.close()
