import logging
from typing import Optional

from ..core.ai_client import ai_client
from ..schemas import GeneratedRecipe, IngredientItem, NutritionalInfo
from ..settings import settings

logger = logging.getLogger("fridgechef.ai")

FRIDGE_ANALYSIS_PROMPT = (
    "Analyze this fridge photo and identify all visible food ingredients. "
    "List each ingredient you can clearly see, focusing on fresh produce, proteins, "
    "dairy, condiments, and pantry items. Be specific but realistic - only list items "
    "you can actually see."
)

RECIPE_SYSTEM_PROMPT = """
You are a practical home cook. Output ONLY valid JSON matching the provided schema.
No markdown, no prose, no code fences.
"""


def build_recipe_prompt(
    ingredients_text: str,
    cuisine: Optional[str] = None,
    cooking_time: Optional[str] = None,
) -> str:
    return f"""Based on the following ingredients identified from a fridge photo: {ingredients_text}

User preferences:
- Cuisine style: {cuisine or "Any cuisine"}
- Cooking time preference: {cooking_time or "No specific time limit"}

Create a delicious, practical recipe using primarily the ingredients available. You can suggest common pantry staples (salt, pepper, oil, etc.) that most kitchens have. The recipe should be:
- Realistic and achievable with the available ingredients
- Include proper portions for each ingredient
- Have clear step-by-step instructions
- Include accurate nutritional information
- Match the user's cuisine and time preferences when possible

Make it appealing and something someone would actually want to cook!"""


class ChefAIService:
    def __init__(self):
        self.mode = settings.ai_mode

    async def analyze_fridge(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
        """Free-text list of the ingredients visible in a fridge photo."""
        if self.mode == "mock":
            return self._mock_analysis()

        text = await ai_client.describe_image(
            prompt=FRIDGE_ANALYSIS_PROMPT,
            image_bytes=image_bytes,
            mime_type=mime_type,
        )
        if not text or not text.strip():
            raise ValueError(f"Ingredient analysis returned nothing ({ai_client.last_error})")
        return text.strip()

    async def generate_recipe(
        self,
        ingredients_text: str,
        cuisine: Optional[str] = None,
        cooking_time: Optional[str] = None,
    ) -> GeneratedRecipe:
        """Schema-constrained recipe for the detected ingredients."""
        if self.mode == "mock":
            return self._mock_recipe(cuisine, cooking_time)

        recipe = await ai_client.generate_structured(
            prompt=build_recipe_prompt(ingredients_text, cuisine, cooking_time),
            response_model=GeneratedRecipe,
            system_instruction=RECIPE_SYSTEM_PROMPT,
        )
        if recipe is None:
            raise ValueError(f"Recipe generation failed ({ai_client.last_error})")
        return recipe

    def _mock_analysis(self) -> str:
        return "eggs, cheddar cheese, spinach, cherry tomatoes, butter, milk, half an onion"

    def _mock_recipe(self, cuisine: Optional[str], cooking_time: Optional[str]) -> GeneratedRecipe:
        style = cuisine or "Farmhouse"
        return GeneratedRecipe(
            title=f"{style} Spinach and Cheddar Frittata",
            description="A fluffy oven frittata that uses up eggs, greens and the last of the cheese.",
            ingredients=[
                IngredientItem(name="Eggs", amount="6 large"),
                IngredientItem(name="Cheddar cheese", amount="1 cup", notes="grated"),
                IngredientItem(name="Spinach", amount="2 cups", notes="roughly chopped"),
                IngredientItem(name="Cherry tomatoes", amount="1 cup", notes="halved"),
                IngredientItem(name="Onion", amount="1/2", notes="thinly sliced"),
                IngredientItem(name="Butter", amount="1 tbsp"),
                IngredientItem(name="Milk", amount="1/4 cup"),
            ],
            instructions=[
                "Heat the oven to 200C (400F).",
                "Whisk the eggs with the milk, a pinch of salt and pepper.",
                "Melt the butter in an oven-safe skillet and soften the onion for 5 minutes.",
                "Add the spinach and cook until wilted, then scatter over the tomatoes.",
                "Pour in the eggs, top with cheddar and cook for 2 minutes until the edges set.",
                "Bake for 12-15 minutes until puffed and golden. Rest 5 minutes before slicing.",
            ],
            cooking_time=cooking_time or "30 minutes",
            difficulty="Easy",
            nutritional_info=NutritionalInfo(
                calories=320,
                protein="21g",
                carbs="6g",
                fat="24g",
                fiber="1g",
                servings=4,
            ),
        )


ai_service = ChefAIService()
