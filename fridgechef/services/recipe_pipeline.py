"""Fridge photo -> stored recipe.

Five steps, awaited strictly in sequence:

1. extract_ingredients   (fatal)        vision model describes the fridge photo
2. generate_recipe       (fatal)        schema-constrained recipe generation
3. generate_dish_image   (best effort)  failure -> no image
4. persist_dish_image    (best effort)  failure -> keep the provider's URL
5. persist_recipe        (fatal)        single row insert

Each step reports a StepOutcome instead of raising, so the partial-failure
policy lives in ``run`` and can be exercised without any network calls.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from ..ai.dish_image import generate_dish_image
from ..core.fetch import fetch_image
from ..models import Recipe
from ..schemas import GeneratedRecipe
from ..storage.s3_compat import S3CompatStore
from .ai_service import ChefAIService
from .recipe_repository import RecipeRepository

logger = logging.getLogger("fridgechef.pipeline")

T = TypeVar("T")


class StepStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FALLBACK = "fallback"
    FAILED = "failed"


@dataclass
class StepOutcome(Generic[T]):
    step: str
    status: StepStatus
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, step: str, value: T) -> "StepOutcome[T]":
        return cls(step=step, status=StepStatus.SUCCEEDED, value=value)

    @classmethod
    def fallback(cls, step: str, value: Optional[T], error: Optional[str] = None) -> "StepOutcome[T]":
        return cls(step=step, status=StepStatus.FALLBACK, value=value, error=error)

    @classmethod
    def failed(cls, step: str, error: str) -> "StepOutcome[T]":
        return cls(step=step, status=StepStatus.FAILED, error=error)

    @property
    def is_fatal(self) -> bool:
        return self.status is StepStatus.FAILED


class PipelineAborted(Exception):
    def __init__(self, outcome: StepOutcome, outcomes: list[StepOutcome]):
        self.outcome = outcome
        self.outcomes = outcomes
        super().__init__(f"{outcome.step} failed: {outcome.error}")


@dataclass
class PipelineResult:
    recipe: Recipe
    generated: GeneratedRecipe
    outcomes: list[StepOutcome] = field(default_factory=list)


def slugify_title(title: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "-", title)


def dish_image_key(user_id: str, title: str, now_ms: Optional[int] = None) -> str:
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"dishes/dish-{user_id}-{ts}-{slugify_title(title)}.png"


async def _capture(step: str, call: Callable[[], Awaitable[T]]) -> StepOutcome[T]:
    try:
        return StepOutcome.ok(step, await call())
    except Exception as e:
        logger.error(f"{step} failed: {e}")
        return StepOutcome.failed(step, f"{e.__class__.__name__}: {e}")


class RecipePipeline:
    def __init__(
        self,
        *,
        ai: ChefAIService,
        store: S3CompatStore,
        repository: RecipeRepository,
        fetch: Optional[Callable[[str], Awaitable[Any]]] = None,
        dish_images: Optional[Callable[[str], Awaitable[Any]]] = None,
    ):
        self.ai = ai
        self.store = store
        self.repository = repository
        self.fetch = fetch or fetch_image
        self.dish_images = dish_images or generate_dish_image

    async def extract_ingredients(self, image_url: str) -> StepOutcome[str]:
        async def call() -> str:
            image = await self.fetch(image_url)
            return await self.ai.analyze_fridge(image.data, image.content_type)

        return await _capture("extract_ingredients", call)

    async def generate_recipe(
        self,
        ingredients_text: str,
        cuisine: Optional[str],
        cooking_time: Optional[str],
    ) -> StepOutcome[GeneratedRecipe]:
        return await _capture(
            "generate_recipe",
            lambda: self.ai.generate_recipe(ingredients_text, cuisine, cooking_time),
        )

    async def generate_dish_image(self, title: str) -> StepOutcome[Optional[str]]:
        step = "generate_dish_image"
        try:
            image = await self.dish_images(title)
        except Exception as e:
            logger.warning(f"Dish image generation failed, continuing without image: {e}")
            return StepOutcome.fallback(step, None, f"{e.__class__.__name__}: {e}")

        if image is None:
            return StepOutcome.fallback(step, None, "image generation disabled")
        logger.info(f"Dish image for '{title[:50]}' generated by {image.model}")
        return StepOutcome.ok(step, image.url)

    async def persist_dish_image(
        self,
        foreign_url: Optional[str],
        *,
        user_id: str,
        title: str,
    ) -> StepOutcome[Optional[str]]:
        step = "persist_dish_image"
        if not foreign_url:
            return StepOutcome.fallback(step, None, "no dish image to store")

        try:
            image = await self.fetch(foreign_url)
            result = await asyncio.to_thread(
                self.store.put_bytes,
                key=dish_image_key(user_id, title),
                content_type="image/png",
                data=image.data,
            )
        except Exception as e:
            logger.warning(f"Storing dish image failed, keeping provider URL: {e}")
            return StepOutcome.fallback(step, foreign_url, f"{e.__class__.__name__}: {e}")

        return StepOutcome.ok(step, result.public_url)

    def persist_recipe(
        self,
        *,
        user_id: str,
        generated: GeneratedRecipe,
        cuisine: Optional[str],
        image_url: str,
        dish_image_url: Optional[str],
    ) -> StepOutcome[Recipe]:
        step = "persist_recipe"
        try:
            recipe = self.repository.insert(
                user_id=user_id,
                generated=generated,
                cuisine=cuisine,
                original_image_url=image_url,
                finished_dish_image_url=dish_image_url,
            )
        except Exception as e:
            logger.error(f"{step} failed: {e}")
            return StepOutcome.failed(step, f"{e.__class__.__name__}: {e}")
        return StepOutcome.ok(step, recipe)

    async def _discard_owned_blob(self, url: Optional[str]) -> None:
        key = self.store.key_for_url(url)
        if not key:
            return
        try:
            await asyncio.to_thread(self.store.delete, key)
        except Exception as e:
            logger.warning(f"Failed to delete orphaned dish image {key}: {e}")

    async def run(
        self,
        *,
        user_id: str,
        image_url: str,
        cuisine: Optional[str] = None,
        cooking_time: Optional[str] = None,
    ) -> PipelineResult:
        outcomes: list[StepOutcome] = []

        def check(outcome: StepOutcome) -> StepOutcome:
            outcomes.append(outcome)
            if outcome.is_fatal:
                raise PipelineAborted(outcome, outcomes)
            return outcome

        ingredients = check(await self.extract_ingredients(image_url))
        generated = check(
            await self.generate_recipe(ingredients.value, cuisine, cooking_time)
        ).value
        dish = check(await self.generate_dish_image(generated.title))
        stored = check(
            await self.persist_dish_image(dish.value, user_id=user_id, title=generated.title)
        )

        saved = self.persist_recipe(
            user_id=user_id,
            generated=generated,
            cuisine=cuisine,
            image_url=image_url,
            dish_image_url=stored.value,
        )
        if saved.is_fatal and stored.status is StepStatus.SUCCEEDED:
            await self._discard_owned_blob(stored.value)
        check(saved)

        logger.info(
            "Recipe %s generated for user %s (%s)",
            saved.value.id,
            user_id,
            ", ".join(f"{o.step}={o.status.value}" for o in outcomes),
        )
        return PipelineResult(recipe=saved.value, generated=generated, outcomes=outcomes)
