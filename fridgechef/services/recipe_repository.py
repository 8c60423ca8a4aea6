"""Recipe persistence scoped by owner.

Every read and delete filters on ``(id, user_id)``, so a missing row and a row
owned by someone else are indistinguishable to callers.
"""

from typing import Optional

from sqlalchemy import delete, desc
from sqlalchemy.orm import Session

from ..models import Recipe
from ..schemas import GeneratedRecipe


class RecipeRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user_id: str) -> list[Recipe]:
        return (
            self.db.query(Recipe)
            .filter(Recipe.user_id == user_id)
            .order_by(desc(Recipe.created_at), desc(Recipe.id))
            .all()
        )

    def get_for_user(self, recipe_id: int, user_id: str) -> Optional[Recipe]:
        return (
            self.db.query(Recipe)
            .filter(Recipe.id == recipe_id, Recipe.user_id == user_id)
            .first()
        )

    def delete_for_user(self, recipe_id: int, user_id: str) -> bool:
        """One DELETE filtered on (id, user_id); False when nothing matched.

        Share links go with it through the foreign key's ON DELETE CASCADE.
        """
        result = self.db.execute(
            delete(Recipe)
            .where(Recipe.id == recipe_id, Recipe.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount > 0

    def insert(
        self,
        *,
        user_id: str,
        generated: GeneratedRecipe,
        cuisine: Optional[str],
        original_image_url: str,
        finished_dish_image_url: Optional[str],
    ) -> Recipe:
        recipe = Recipe(
            user_id=user_id,
            title=generated.title,
            description=generated.description,
            ingredients=[i.model_dump(exclude_none=True) for i in generated.ingredients],
            instructions=list(generated.instructions),
            nutritional_info=generated.nutritional_info.model_dump(),
            cooking_time=generated.cooking_time,
            difficulty=generated.difficulty,
            cuisine=cuisine or "Mixed",
            original_image_url=original_image_url,
            finished_dish_image_url=finished_dish_image_url or None,
        )
        self.db.add(recipe)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(recipe)
        return recipe
