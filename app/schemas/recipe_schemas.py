"""
Recipe schema shared by the recipe-generation and recipe-search responses.

The upstream service has returned recipes in several shapes over time:
capitalised keys (Name/Steps/Ingredients/Time) or lowercase ones, and list
fields either as real JSON arrays or as stringified arrays. Recipe accepts all
of them and rejects anything else instead of defaulting to empty lists.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

LEGACY_KEYS = {"Name": "name", "Steps": "steps", "Ingredients": "ingredients", "Time": "time"}


class RecipeSchemaMismatch(ValueError):
    """Raised when a payload cannot be normalized into a Recipe."""

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


def _decode_list(value: Any, field: str) -> Any:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{field} is a string but not a JSON array") from exc
    if not isinstance(value, list):
        raise ValueError(f"{field} must be an array of strings")
    return value


class Recipe(BaseModel):
    name: str = Field(..., min_length=1)
    ingredients: List[str]
    steps: List[str]
    time: Optional[int] = Field(default=None, ge=0, description="Minutes")

    @model_validator(mode="before")
    @classmethod
    def normalize_legacy_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValueError("recipe must be a JSON object")

        normalized: Dict[str, Any] = {}
        for key, value in data.items():
            target = LEGACY_KEYS.get(key, key)
            if target in normalized and value != normalized[target]:
                raise ValueError(f"conflicting values for {target}")
            normalized[target] = value

        for field in ("ingredients", "steps"):
            if field in normalized:
                normalized[field] = _decode_list(normalized[field], field)
        return normalized


def legacy_payload(recipe: Recipe) -> Dict[str, Any]:
    """The capitalised body the save and favorite endpoints expect."""
    return {
        "Name": recipe.name,
        "Steps": recipe.steps,
        "Time": recipe.time or 0,
        "Ingredients": recipe.ingredients,
    }


def parse_recipe(raw: Any) -> Recipe:
    """Normalize one raw recipe object, or raise RecipeSchemaMismatch."""
    try:
        return Recipe.model_validate(raw)
    except ValidationError as exc:
        raise RecipeSchemaMismatch(f"Recipe payload does not match schema: {exc}", raw) from exc


def parse_generated_recipe(payload: Any) -> Recipe:
    """The generation endpoint answers with a one-element array (or a bare object)."""
    if isinstance(payload, list):
        if not payload:
            raise RecipeSchemaMismatch("No recipe found in the response", payload)
        payload = payload[0]
    return parse_recipe(payload)
