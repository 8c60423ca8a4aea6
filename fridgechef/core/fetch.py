from dataclasses import dataclass
from typing import Optional

import httpx

from ..settings import settings


@dataclass
class FetchedImage:
    data: bytes
    content_type: str


async def fetch_image(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    default_type: str = "image/jpeg",
) -> FetchedImage:
    """GET an image URL and return its bytes. Raises on non-2xx."""
    if client is None:
        async with httpx.AsyncClient(
            timeout=settings.http_timeout_seconds, follow_redirects=True
        ) as owned:
            response = await owned.get(url)
    else:
        response = await client.get(url)

    response.raise_for_status()
    content_type = response.headers.get("content-type", default_type).split(";")[0].strip()
    if not content_type.startswith("image/"):
        content_type = default_type
    return FetchedImage(data=response.content, content_type=content_type)
