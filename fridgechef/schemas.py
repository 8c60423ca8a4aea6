"""Pydantic schemas for the FridgeChef API.

Request/response models for:
- Generated recipes (the schema handed to the structured-generation call)
- Stored recipes
- Auth, uploads and shares

Everything is serialised with camelCase keys.
"""

from datetime import datetime
from typing import Optional, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


Difficulty = Literal["Easy", "Medium", "Hard"]


# --- Generated recipe (structured generation schema) ---

class IngredientItem(CamelModel):
    name: str = Field(..., min_length=1, description="Ingredient name")
    amount: str = Field(..., min_length=1, description="Amount needed (e.g., '2 cups', '1 lb', '3 cloves')")
    notes: Optional[str] = Field(None, description="Any special notes about the ingredient")


class NutritionalInfo(CamelModel):
    calories: float = Field(..., description="Estimated calories per serving")
    protein: str = Field(..., description="Protein content (e.g., '25g')")
    carbs: str = Field(..., description="Carbohydrate content (e.g., '30g')")
    fat: str = Field(..., description="Fat content (e.g., '15g')")
    fiber: str = Field(..., description="Fiber content (e.g., '8g')")
    servings: int = Field(..., ge=1, description="Number of servings this recipe makes")


class GeneratedRecipe(CamelModel):
    title: str = Field(..., min_length=1, description="A catchy name for the recipe")
    description: str = Field(..., min_length=1, description="Brief description of the dish")
    ingredients: list[IngredientItem] = Field(..., min_length=1, description="List of ingredients with portions")
    instructions: list[str] = Field(..., min_length=1, description="Step-by-step cooking instructions")
    cooking_time: str = Field(..., description="Total cooking time estimate")
    difficulty: Difficulty = Field(..., description="Difficulty level")
    nutritional_info: NutritionalInfo = Field(..., description="Nutritional information per serving")


# --- Stored recipe ---

class GenerateRecipeRequest(CamelModel):
    # optional so a missing value reports "Image URL is required"
    image_url: Optional[str] = None
    cuisine: Optional[str] = None
    cooking_time: Optional[str] = None


class RecipeOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    user_id: str
    title: str
    description: Optional[str] = None
    ingredients: list[dict]
    instructions: list[str]
    nutritional_info: Optional[dict] = None
    cooking_time: Optional[str] = None
    difficulty: Optional[str] = None
    cuisine: Optional[str] = None
    original_image_url: str
    finished_dish_image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class GenerateRecipeResponse(CamelModel):
    success: bool = True
    recipe: RecipeOut
    generated_data: GeneratedRecipe


class RecipeListResponse(CamelModel):
    recipes: list[RecipeOut]


class RecipeResponse(CamelModel):
    recipe: RecipeOut


class DeleteRecipeResponse(CamelModel):
    success: bool = True
    message: str


# --- Upload ---

class UploadResponse(CamelModel):
    url: str


# --- Auth ---

class SignUpRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=8, max_length=128)


class SignInRequest(CamelModel):
    email: str
    password: str


class UserOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    name: str
    email: str
    email_verified: Optional[bool] = None
    image: Optional[str] = None
    created_at: datetime


class SessionOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    user_id: str
    expires_at: datetime


class AuthResponse(CamelModel):
    token: str
    user: UserOut


class SessionResponse(CamelModel):
    session: SessionOut
    user: UserOut


# --- Shares ---

class CreateShareRequest(CamelModel):
    expires_in_days: Optional[int] = Field(None, ge=1, le=365)


class ShareOut(CamelModel):
    share_id: str
    recipe_id: int
    expires_at: Optional[datetime] = None
