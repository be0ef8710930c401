# =============================================================================
# lib/embeddings.py - Text Embeddings and Reranking
# =============================================================================
# Wraps Cloudflare Workers AI:
# - @cf/baai/bge-m3             embeddings
# - @cf/baai/bge-reranker-base  reranking
#
# Plus small helpers built on top: cosine similarity, nearest-neighbour
# search, batching, and a hybrid search (embed, shortlist, rerank).
#
# Usage:
#   from lib.embeddings import EmbeddingsClient
#   client = EmbeddingsClient.from_settings()
#   result = client.generate_embeddings(["hello", "world"])
#   result.shape  # (2, 1024)
# =============================================================================

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx

from app.config import settings
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

CLOUDFLARE_API_URL = "https://api.cloudflare.com/client/v4/accounts"
DEFAULT_EMBEDDING_MODEL = "@cf/baai/bge-m3"
DEFAULT_RERANKER_MODEL = "@cf/baai/bge-reranker-base"


class EmbeddingError(ApplicationError):
    def __init__(self, message: str, **kwargs):
        super().__init__(message, code=kwargs.pop("code", "EMBEDDING_ERROR"), **kwargs)


@dataclass
class EmbeddingResponse:
    embeddings: list[list[float]]
    model: str

    @property
    def shape(self) -> tuple[int, int]:
        return (len(self.embeddings), len(self.embeddings[0]) if self.embeddings else 0)


@dataclass
class RankedText:
    index: int
    score: float
    text: str


@dataclass
class RerankResponse:
    model: str
    results: list[RankedText] = field(default_factory=list)


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """
    Cosine similarity between two vectors, in [-1, 1].

    Zero vectors score 0.
    """
    if len(a) != len(b):
        raise ValueError("Vectors must have the same length")

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class EmbeddingsClient:
    """
    Cloudflare Workers AI client for embeddings and reranking.
    """

    def __init__(
        self,
        api_key: str | None,
        account_id: str | None,
        http_client: httpx.Client | None = None,
    ):
        if not api_key or not account_id:
            raise EmbeddingError(
                "Cloudflare is not configured",
                code="EMBEDDINGS_NOT_CONFIGURED",
                suggestion="Set CLOUDFLARE_API_KEY and CLOUDFLARE_ACCOUNT_ID in your .env file",
            )
        self.api_key = api_key
        self.account_id = account_id
        self.http = http_client or httpx.Client(timeout=60)

    @classmethod
    def from_settings(cls) -> EmbeddingsClient:
        return cls(settings.CLOUDFLARE_API_KEY, settings.CLOUDFLARE_ACCOUNT_ID)

    def _run(self, model: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{CLOUDFLARE_API_URL}/{self.account_id}/ai/run/{model}"
        try:
            response = self.http.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as e:
            raise EmbeddingError(f"Cloudflare request failed: {e}")

        if response.status_code >= 400:
            raise EmbeddingError(
                f"Cloudflare API error ({response.status_code}): {response.text}",
                details={"model": model, "status": response.status_code},
            )
        return response.json()

    # -------------------------------------------------------------------------
    # Embeddings
    # -------------------------------------------------------------------------

    def generate_embeddings(
        self,
        texts: str | list[str],
        model: str = DEFAULT_EMBEDDING_MODEL,
    ) -> EmbeddingResponse:
        """
        Embed one or more texts.

        Raises:
            EmbeddingError: On empty input or an API failure
        """
        inputs = [texts] if isinstance(texts, str) else list(texts)
        if not inputs:
            raise EmbeddingError("Input cannot be empty")
        if any(not text or not text.strip() for text in inputs):
            raise EmbeddingError("Input contains empty strings")

        result = self._run(model, {"text": inputs})
        data = (result.get("result") or {}).get("data")
        if not result.get("success") or data is None:
            raise EmbeddingError(f"Invalid response from Cloudflare API: {result}")

        return EmbeddingResponse(embeddings=data, model=model)

    def batch_generate_embeddings(
        self,
        texts: list[str],
        batch_size: int = 100,
        model: str = DEFAULT_EMBEDDING_MODEL,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> EmbeddingResponse:
        """Embed a long list in sequential batches."""
        embeddings: list[list[float]] = []
        for start in range(0, len(texts), batch_size):
            batch = texts[start:start + batch_size]
            embeddings.extend(self.generate_embeddings(batch, model=model).embeddings)
            if on_progress:
                on_progress(min(start + batch_size, len(texts)), len(texts))
        return EmbeddingResponse(embeddings=embeddings, model=model)

    def find_most_similar(
        self,
        query: str,
        candidates: list[str],
        top_k: int | None = None,
        threshold: float = 0.0,
        model: str = DEFAULT_EMBEDDING_MODEL,
    ) -> list[RankedText]:
        """
        Rank candidates by cosine similarity to the query.

        Query and candidates are embedded in one request.
        """
        if not candidates:
            return []

        vectors = self.generate_embeddings([query, *candidates], model=model).embeddings
        query_vector, candidate_vectors = vectors[0], vectors[1:]

        ranked = [
            RankedText(index=i, score=cosine_similarity(query_vector, vector), text=candidates[i])
            for i, vector in enumerate(candidate_vectors)
        ]
        ranked = sorted((r for r in ranked if r.score >= threshold), key=lambda r: r.score, reverse=True)
        return ranked[:top_k] if top_k and top_k > 0 else ranked

    # -------------------------------------------------------------------------
    # Reranking
    # -------------------------------------------------------------------------

    def rerank_documents(
        self,
        query: str,
        documents: list[str],
        top_k: int | None = None,
        model: str = DEFAULT_RERANKER_MODEL,
    ) -> RerankResponse:
        """Score documents against a query with the reranker, best first."""
        if not query or not query.strip():
            raise EmbeddingError("Query cannot be empty")
        if not documents:
            return RerankResponse(model=model)

        payload: dict[str, Any] = {
            "query": query,
            "contexts": [{"text": text} for text in documents],
        }
        if top_k:
            payload["top_k"] = top_k

        result = self._run(model, payload)
        items = (result.get("result") or {}).get("response")
        if not isinstance(items, list):
            raise EmbeddingError(f"Invalid response format from reranker: {result}")

        ranked = sorted(
            (RankedText(index=item["id"], score=item["score"], text=documents[item["id"]]) for item in items),
            key=lambda r: r.score,
            reverse=True,
        )
        return RerankResponse(model=model, results=ranked[:top_k] if top_k and top_k > 0 else ranked)

    def hybrid_search(
        self,
        query: str,
        documents: list[str],
        initial_top_k: int = 20,
        final_top_k: int = 10,
        similarity_threshold: float = 0.3,
        embedding_model: str = DEFAULT_EMBEDDING_MODEL,
        reranker_model: str = DEFAULT_RERANKER_MODEL,
    ) -> RerankResponse:
        """
        Shortlist by embedding similarity, then rerank the shortlist.

        Result indexes refer to positions in the original documents list.
        """
        if not documents:
            return RerankResponse(model=reranker_model)

        shortlist = self.find_most_similar(
            query,
            documents,
            top_k=min(initial_top_k, len(documents)),
            threshold=similarity_threshold,
            model=embedding_model,
        )
        if not shortlist:
            return RerankResponse(model=reranker_model)

        reranked = self.rerank_documents(
            query,
            [item.text for item in shortlist],
            top_k=final_top_k,
            model=reranker_model,
        )
        results = [
            RankedText(index=shortlist[r.index].index, score=r.score, text=shortlist[r.index].text)
            for r in reranked.results
        ]
        return RerankResponse(model=reranked.model, results=results)
