"""
Recipe photos from the OpenAI images API
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from fitfuel.config import IMAGE_MODEL, OPENAI_API_KEY, OPENAI_IMAGES_URL

logger = logging.getLogger(__name__)

# Generated image URLs by recipe id (in production, use a database)
image_cache: Dict[str, str] = {}

IMAGE_PROMPT_TEMPLATE = """Professional food photography of {name}.
A beautifully plated dish featuring {ingredients}.
The dish should look appetizing, fresh, and restaurant-quality.
Natural lighting, shallow depth of field, styled for a cookbook.
High-resolution, vibrant colors, professional composition."""


def build_image_prompt(recipe_name: str, ingredients: List[Dict[str, Any]]) -> str:
    items = [str(ing.get("item") or ing.get("name") or "") for ing in ingredients[:5] if isinstance(ing, dict)]
    return IMAGE_PROMPT_TEMPLATE.format(name=recipe_name, ingredients=", ".join(item for item in items if item))


async def generate_recipe_image(recipe_name: str, ingredients: List[Dict[str, Any]],
                                recipe_id: Optional[str] = None) -> Optional[str]:
    """Generate an image for a recipe using OpenAI DALL-E"""
    if recipe_id and recipe_id in image_cache:
        return image_cache[recipe_id]

    if not OPENAI_API_KEY:
        logger.info("OPENAI_API_KEY not set, skipping image for %s", recipe_name)
        return None

    headers = {
        "Authorization": f"Bearer {OPENAI_API_KEY}",
        "Content-Type": "application/json"
    }
    payload = {
        "model": IMAGE_MODEL,
        "prompt": build_image_prompt(recipe_name, ingredients),
        "n": 1,
        "size": "1024x1024",
        "quality": "standard",
        "style": "natural",
    }

    try:
        async with httpx.AsyncClient(timeout=60.0) as client:
            response = await client.post(OPENAI_IMAGES_URL, headers=headers, json=payload)
    except httpx.HTTPError as e:
        logger.error("OpenAI image generation error for %s: %s", recipe_name, e)
        return None

    if response.status_code != 200:
        logger.error("OpenAI image API returned %d for %s: %s", response.status_code, recipe_name, response.text[:200])
        return None

    try:
        image_url = (response.json().get("data") or [{}])[0].get("url")
    except (ValueError, AttributeError, IndexError, KeyError, TypeError) as e:
        logger.error("Unexpected OpenAI image response for %s: %s (%s)", recipe_name, response.text[:200], e)
        return None

    if not isinstance(image_url, str) or not image_url:
        logger.error("OpenAI image response for %s has no URL", recipe_name)
        return None
    if recipe_id:
        image_cache[recipe_id] = image_url
    logger.info("Generated image for %s", recipe_name)
    return image_url
