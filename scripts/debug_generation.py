"""Run the ingredient -> recipe -> dish image chain against a real photo URL.

Usage: python scripts/debug_generation.py https://example.com/fridge.jpg [cuisine] [cooking time]

Nothing is written to the database or the bucket; each step's outcome is printed.
"""
import sys
import os
import asyncio

# Setup path
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from fridgechef.services.ai_service import ai_service
from fridgechef.services.recipe_pipeline import RecipePipeline, StepStatus


async def main(image_url: str, cuisine: str | None, cooking_time: str | None):
    # store/repository are unused by the steps called here
    pipeline = RecipePipeline(ai=ai_service, store=None, repository=None)

    print(f"AI mode: {ai_service.mode}")

    ingredients = await pipeline.extract_ingredients(image_url)
    print(f"[{ingredients.status.value}] ingredients: {ingredients.value or ingredients.error}")
    if ingredients.status is StepStatus.FAILED:
        return

    recipe = await pipeline.generate_recipe(ingredients.value, cuisine, cooking_time)
    if recipe.status is StepStatus.FAILED:
        print(f"[failed] recipe: {recipe.error}")
        return
    print(f"[{recipe.status.value}] recipe:")
    print(recipe.value.model_dump_json(by_alias=True, indent=2))

    dish = await pipeline.generate_dish_image(recipe.value.title)
    print(f"[{dish.status.value}] dish image: {dish.value or dish.error}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    args = sys.argv[1:] + [None, None]
    asyncio.run(main(args[0], args[1], args[2]))
