"""Remote vector index on a Qdrant collection, over its HTTP API."""

from __future__ import annotations

import httpx

from reclaim.config import MAX_DELETE_BATCH
from reclaim.index.base import VectorIndex, VectorIndexError


class QdrantIndex(VectorIndex):
    """Deletes points from one Qdrant collection by point ID.

    Args:
        base_url: Qdrant server URL, e.g. ``http://localhost:6333``.
        collection: Collection holding the asset vectors.
        api_key: Optional key, sent as the ``api-key`` header.
        timeout: Per-request timeout in seconds.
        batch_size: Maximum IDs per delete call.
        client: Pre-built httpx client (tests inject a MockTransport). A
            client passed in is not closed by close().
    """

    def __init__(
        self,
        base_url: str,
        collection: str,
        *,
        api_key: str | None = None,
        timeout: float = 10.0,
        batch_size: int = MAX_DELETE_BATCH,
        client: httpx.Client | None = None,
    ) -> None:
        super().__init__(batch_size)
        self.collection = collection
        self.name = f"qdrant:{collection}"
        headers = {"api-key": api_key} if api_key else {}
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=base_url.rstrip("/"), headers=headers, timeout=timeout
        )

    def _get_endpoint_delete_points(self) -> str:
        return f"/collections/{self.collection}/points/delete"

    def _delete_batch(self, batch: list[str]) -> None:
        try:
            response = self._client.post(
                self._get_endpoint_delete_points(),
                params={"wait": "true"},
                json={"points": batch},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise VectorIndexError(
                f"{self.name}: delete returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise VectorIndexError(f"{self.name}: delete request failed: {exc}") from exc

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
