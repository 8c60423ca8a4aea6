import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..settings import settings

logger = logging.getLogger("fridgechef.images")


class DishImageError(RuntimeError):
    """The images endpoint could not produce a usable URL."""


@dataclass
class GeneratedDishImage:
    url: str
    model: str


def build_dish_prompt(title: str) -> str:
    # tuned for a restaurant-menu look
    return (
        f"A professional, appetizing food photograph of {title}. "
        "The dish should look delicious, well-plated, and restaurant-quality. "
        "Bright, natural lighting, shallow depth of field, garnished beautifully. "
        "Food photography style, high resolution, mouth-watering presentation."
    )


async def generate_dish_image(
    title: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[GeneratedDishImage]:
    """Ask the images endpoint for a photo of the finished dish.

    Returns None when image generation is switched off. Raises DishImageError
    (or an httpx error) when the provider call fails.
    """
    prompt = build_dish_prompt(title)

    if not settings.ai_images_enabled:
        logger.info("Dish image generation disabled, skipping")
        return None

    if not settings.images_api_key:
        raise DishImageError("IMAGES_API_KEY is required when AI_IMAGES_ENABLED=true")

    payload = {
        "model": settings.images_model,
        "prompt": prompt,
        "size": settings.images_size,
        "quality": settings.images_quality,
        "n": 1,
    }
    headers = {
        "Authorization": f"Bearer {settings.images_api_key}",
        "Content-Type": "application/json",
    }

    logger.info(f"Generating dish image with model={settings.images_model} title='{title[:50]}'")

    if client is None:
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as owned:
            response = await owned.post(settings.images_api_url, json=payload, headers=headers)
    else:
        response = await client.post(settings.images_api_url, json=payload, headers=headers)

    if response.status_code != 200:
        raise DishImageError(f"Images endpoint returned {response.status_code}")

    data = response.json().get("data") or [{}]
    url = data[0].get("url")
    if not url:
        raise DishImageError("Images endpoint returned no image URL")

    return GeneratedDishImage(url=url, model=settings.images_model)
