"""
Embedding client interface.

Abstract contract shared by the Ollama client and test doubles.

Dependencies: doclib.core.exceptions
System role: Seam between the engine and the inference service
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from doclib.core.exceptions import EmbeddingError


class EmbeddingClient(ABC):
    """Converts text into fixed-dimension vectors."""

    dimension: int

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """
        Embed a single text.

        Raises:
            EmbeddingError: Service failure or invalid vector
        """
        ...

    @abstractmethod
    def embed_batch(self, texts: Sequence[str], concurrency: int | None = None) -> list[list[float]]:
        """
        Embed many texts; result[i] is the vector of texts[i].

        Raises:
            EmbeddingError: On the first failure, with no partial result
        """
        ...

    @abstractmethod
    def check_health(self) -> None:
        """
        Verify the service is reachable and the model is installed.

        Raises:
            EmbeddingError: Service unreachable or model missing
        """
        ...

    def is_healthy(self) -> bool:
        try:
            self.check_health()
        except EmbeddingError:
            return False
        return True

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
