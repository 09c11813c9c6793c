"""
FastAPI server for FitFuel meal plans and recipe books
Streams documents to the browser as the LLM writes them, and exports them as PDF
"""

import logging
import uuid
from datetime import datetime
from typing import Any, AsyncIterator, Callable, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from fitfuel import __version__, storage
from fitfuel.config import COMPANY_NAME, HOST, LOG_LEVEL, PORT
from fitfuel.engine import StreamSession, parse_complete_response, stream_events
from fitfuel.images import generate_recipe_image
from fitfuel.llm import call_together_ai, require_api_key, stream_together_ai
from fitfuel.models import ImageRequest, MealPlanForm, NutritionInfo, RecipeBookForm
from fitfuel.nutrition import target_nutrition
from fitfuel.pdf_export import generate_meal_plan_pdf, generate_recipe_book_pdf
from fitfuel.prompts import (MEAL_PLAN_SYSTEM_PROMPT, RECIPE_BOOK_SYSTEM_PROMPT,
                             build_meal_plan_prompt, build_recipe_book_prompt)
from fitfuel.records import MEAL_PLAN, RECIPE_BOOK

logger = logging.getLogger(__name__)

app = FastAPI(title=f"{COMPANY_NAME} Meal Planner", version=__version__)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}

MAX_MEALS_PER_DAY = 6
MAX_RECIPES = 12


def _check_meal_plan_form(form: MealPlanForm) -> None:
    if not 1 <= form.mealsPerDay <= MAX_MEALS_PER_DAY:
        raise HTTPException(
            status_code=400,
            detail=f"Meals per day must be between 1 and {MAX_MEALS_PER_DAY}. You requested {form.mealsPerDay}."
        )


def _check_recipe_book_form(form: RecipeBookForm) -> None:
    if not form.prompt.strip():
        raise HTTPException(status_code=400, detail="Please describe the recipes you want.")
    if not 1 <= form.numberOfRecipes <= MAX_RECIPES:
        raise HTTPException(
            status_code=400,
            detail=f"Number of recipes must be between 1 and {MAX_RECIPES}. You requested {form.numberOfRecipes}."
        )


def meal_plan_envelope(form: MealPlanForm, targets: NutritionInfo) -> Dict[str, Any]:
    """Fields of a meal plan that do not come from the LLM"""
    return {
        "id": f"mp-{uuid.uuid4().hex[:12]}",
        "userInfo": {"name": form.name, "email": form.email},
        "preferences": form.model_dump(),
        "createdAt": datetime.now().isoformat(),
        "targetNutrition": targets.model_dump(),
    }


def recipe_book_envelope() -> Dict[str, Any]:
    return {
        "id": f"rb-{uuid.uuid4().hex[:12]}",
        "createdAt": datetime.now().isoformat(),
    }


async def _event_stream(session: StreamSession, fragments: AsyncIterator[str],
                        save: Callable[[Dict[str, Any]], None]) -> AsyncIterator[str]:
    """Encode engine events as SSE frames, storing the finished document"""
    async for event in stream_events(session, fragments):
        if event.type == "complete":
            save(event.data)
        yield event.to_sse()


@app.get("/")
async def root():
    """Service info"""
    return {"name": COMPANY_NAME, "version": __version__, "status": "ok"}


@app.post("/api/stream-meal-plan")
async def stream_meal_plan(form: MealPlanForm):
    """Stream a 7-day meal plan as Server-Sent Events"""
    _check_meal_plan_form(form)
    require_api_key()

    targets = target_nutrition(form.goal, form.dietType, form.calorieTarget)
    prompt = build_meal_plan_prompt(form, targets)
    logger.info("Streaming meal plan - goal: %s, diet: %s, meals per day: %d",
                form.goal, form.dietType, form.mealsPerDay)

    session = StreamSession(MEAL_PLAN, envelope=meal_plan_envelope(form, targets))
    fragments = stream_together_ai(prompt, MEAL_PLAN_SYSTEM_PROMPT, temperature=0.8)
    return StreamingResponse(
        _event_stream(session, fragments, storage.save_meal_plan),
        media_type="text/event-stream",
        headers=SSE_HEADERS
    )


@app.post("/api/stream-recipe-book")
async def stream_recipe_book(form: RecipeBookForm):
    """Stream a recipe book as Server-Sent Events"""
    _check_recipe_book_form(form)
    require_api_key()

    prompt = build_recipe_book_prompt(form)
    logger.info("Streaming recipe book - %d recipes", form.numberOfRecipes)

    session = StreamSession(RECIPE_BOOK, envelope=recipe_book_envelope())
    fragments = stream_together_ai(prompt, RECIPE_BOOK_SYSTEM_PROMPT, temperature=0.9)
    return StreamingResponse(
        _event_stream(session, fragments, storage.save_recipe_book),
        media_type="text/event-stream",
        headers=SSE_HEADERS
    )


@app.post("/api/generate-meal-plan")
async def generate_meal_plan(form: MealPlanForm):
    """Generate a meal plan in one request"""
    _check_meal_plan_form(form)
    targets = target_nutrition(form.goal, form.dietType, form.calorieTarget)
    prompt = build_meal_plan_prompt(form, targets)

    llm_response = await call_together_ai(prompt, MEAL_PLAN_SYSTEM_PROMPT, temperature=0.8)
    event = parse_complete_response(MEAL_PLAN, llm_response, meal_plan_envelope(form, targets))
    if event.type == "error":
        raise HTTPException(status_code=502, detail=event.message)

    storage.save_meal_plan(event.data)
    return event.data


@app.post("/api/generate-recipe-book")
async def generate_recipe_book(form: RecipeBookForm):
    """Generate a recipe book in one request"""
    _check_recipe_book_form(form)
    prompt = build_recipe_book_prompt(form)

    llm_response = await call_together_ai(prompt, RECIPE_BOOK_SYSTEM_PROMPT, temperature=0.9)
    event = parse_complete_response(RECIPE_BOOK, llm_response, recipe_book_envelope())
    if event.type == "error":
        raise HTTPException(status_code=502, detail=event.message)

    storage.save_recipe_book(event.data)
    return event.data


@app.get("/api/meal-plans")
async def list_meal_plans():
    """List stored meal plans, newest first"""
    return {"mealPlans": storage.get_meal_plans()}


@app.get("/api/meal-plan/{plan_id}")
async def get_meal_plan(plan_id: str):
    """Get a specific meal plan"""
    meal_plan = storage.get_meal_plan(plan_id)
    if meal_plan is None:
        raise HTTPException(status_code=404, detail="Meal plan not found")
    return meal_plan


@app.delete("/api/meal-plan/{plan_id}")
async def delete_meal_plan(plan_id: str):
    if not storage.delete_meal_plan(plan_id):
        raise HTTPException(status_code=404, detail="Meal plan not found")
    return {"id": plan_id, "deleted": True}


@app.get("/api/recipe-books")
async def list_recipe_books():
    """List stored recipe books, newest first"""
    return {"recipeBooks": storage.get_recipe_books()}


@app.get("/api/recipe-book/{book_id}")
async def get_recipe_book(book_id: str):
    """Get a specific recipe book"""
    recipe_book = storage.get_recipe_book(book_id)
    if recipe_book is None:
        raise HTTPException(status_code=404, detail="Recipe book not found")
    return recipe_book


@app.delete("/api/recipe-book/{book_id}")
async def delete_recipe_book(book_id: str):
    if not storage.delete_recipe_book(book_id):
        raise HTTPException(status_code=404, detail="Recipe book not found")
    return {"id": book_id, "deleted": True}


@app.get("/api/meal-plan/{plan_id}/export-pdf")
async def export_meal_plan_pdf(plan_id: str):
    """Export meal plan as PDF"""
    meal_plan = storage.get_meal_plan(plan_id)
    if meal_plan is None:
        raise HTTPException(status_code=404, detail="Meal plan not found")

    pdf_buffer = generate_meal_plan_pdf(meal_plan)
    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=meal-plan-{plan_id}.pdf"
        }
    )


@app.get("/api/recipe-book/{book_id}/export-pdf")
async def export_recipe_book_pdf(book_id: str):
    """Export recipe book as PDF"""
    recipe_book = storage.get_recipe_book(book_id)
    if recipe_book is None:
        raise HTTPException(status_code=404, detail="Recipe book not found")

    pdf_buffer = generate_recipe_book_pdf(recipe_book)
    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=recipe-book-{book_id}.pdf"
        }
    )


@app.post("/api/generate-image")
async def generate_image(request: ImageRequest):
    """Generate a photo for one recipe"""
    image_url = await generate_recipe_image(request.recipeName, request.ingredients, request.recipeId)
    if not image_url:
        raise HTTPException(status_code=500, detail="Image generation not available or failed")
    return {"imageUrl": image_url}


def run():
    import uvicorn
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    logger.info("Starting %s server on %s:%d", COMPANY_NAME, HOST, PORT)
    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
