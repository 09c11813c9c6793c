"""
PDF export of meal plans and recipe books
"""

import logging
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

import requests
from PIL import Image as PILImage
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (Image, PageBreak, Paragraph, SimpleDocTemplate,
                                Spacer, Table, TableStyle)

from fitfuel.config import (BRAND_DARK, BRAND_LIGHT, BRAND_PRIMARY,
                            BRAND_SECONDARY, COMPANY_NAME, COMPANY_TAGLINE)

logger = logging.getLogger(__name__)

DIET_TYPE_LABELS = {
    "balanced": "Balanced",
    "keto": "Keto",
    "vegan": "Vegan",
    "vegetarian": "Vegetarian",
    "paleo": "Paleo",
    "mediterranean": "Mediterranean",
}

GOAL_LABELS = {
    "weight_loss": "Weight Loss",
    "muscle_gain": "Muscle Gain",
    "maintenance": "Maintenance",
    "energy": "Energy & Wellness",
}

MAX_IMAGE_WIDTH_PTS = 4 * 72  # 4 inches


def _styles() -> Dict[str, ParagraphStyle]:
    styles = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            'BrandTitle',
            parent=styles['Heading1'],
            fontSize=26,
            alignment=TA_CENTER,
            textColor=colors.HexColor(BRAND_PRIMARY),
            spaceAfter=20
        ),
        "subtitle": ParagraphStyle(
            'BrandSubtitle',
            parent=styles['Heading2'],
            alignment=TA_CENTER,
            textColor=colors.HexColor(BRAND_DARK),
            spaceAfter=16
        ),
        "heading": ParagraphStyle(
            'SectionHeading',
            parent=styles['Heading2'],
            textColor=colors.HexColor(BRAND_SECONDARY)
        ),
        "recipe": styles['Heading3'],
        "normal": styles['Normal'],
        "centered": ParagraphStyle('Centered', parent=styles['Normal'], alignment=TA_CENTER),
        "cell": ParagraphStyle(
            'TableCell',
            parent=styles['Normal'],
            fontSize=8,
            leading=10,
            spaceAfter=3,
            spaceBefore=1
        ),
    }


def _text(value: Any) -> str:
    """Plain value made safe for a reportlab Paragraph"""
    return escape(str(value)) if value is not None else ""


def _num(value: Any) -> int:
    try:
        return round(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def _nutrition_line(nutrition: Optional[Dict[str, Any]]) -> str:
    nutrition = nutrition or {}
    return (f"{_num(nutrition.get('calories'))} cal | {_num(nutrition.get('protein'))}g protein | "
            f"{_num(nutrition.get('carbs'))}g carbs | {_num(nutrition.get('fat'))}g fat")


def _recipe_image(image_url: str) -> Optional[Image]:
    """Download, resize and wrap a recipe image; None if anything goes wrong"""
    try:
        img_response = requests.get(image_url, timeout=10)
        img_response.raise_for_status()
        pil_img = PILImage.open(BytesIO(img_response.content))
        if pil_img.width > MAX_IMAGE_WIDTH_PTS:
            ratio = MAX_IMAGE_WIDTH_PTS / pil_img.width
            pil_img = pil_img.resize((int(MAX_IMAGE_WIDTH_PTS), int(pil_img.height * ratio)),
                                     PILImage.Resampling.LANCZOS)
        img_buffer = BytesIO()
        pil_img.save(img_buffer, format='PNG')
        img_buffer.seek(0)
        # 1 pixel = 1 point at 72 DPI
        return Image(img_buffer, width=pil_img.width, height=pil_img.height)
    except (requests.RequestException, OSError) as e:
        logger.warning("Failed to add image %s to PDF: %s", image_url, e)
        return None


def _recipe_details(recipe: Dict[str, Any], styles: Dict[str, ParagraphStyle]) -> List[Any]:
    """Image, ingredients and instructions of one recipe"""
    story: List[Any] = []

    if recipe.get("imageUrl"):
        image = _recipe_image(recipe["imageUrl"])
        if image is not None:
            story.append(image)
            story.append(Spacer(1, 0.1*inch))

    if recipe.get("ingredients"):
        story.append(Paragraph("<b>Ingredients:</b>", styles["normal"]))
        for ing in recipe["ingredients"]:
            if not isinstance(ing, dict):
                continue
            line = " ".join(part for part in (
                str(ing.get("amount") or ""), str(ing.get("unit") or ""), str(ing.get("item") or "")
            ) if part)
            story.append(Paragraph(f"&bull; {_text(line)}", styles["cell"]))

    if recipe.get("instructions"):
        story.append(Spacer(1, 0.1*inch))
        story.append(Paragraph("<b>Instructions:</b>", styles["normal"]))
        for idx, instruction in enumerate(recipe["instructions"], 1):
            story.append(Paragraph(f"{idx}. {_text(instruction)}", styles["cell"]))

    story.append(Spacer(1, 0.15*inch))
    return story


def _closing_page(message: str, styles: Dict[str, ParagraphStyle]) -> List[Any]:
    return [
        Spacer(1, 2.5*inch),
        Paragraph(_text(message), styles["title"]),
        Paragraph(_text(COMPANY_TAGLINE), styles["centered"]),
        Spacer(1, 3*inch),
        Paragraph(f"&copy; {datetime.now().year} {_text(COMPANY_NAME)}", styles["centered"]),
    ]


def _created_on(document: Dict[str, Any]) -> str:
    created = document.get("createdAt")
    try:
        return datetime.fromisoformat(str(created).replace("Z", "+00:00")).strftime("%B %d, %Y")
    except ValueError:
        return datetime.now().strftime("%B %d, %Y")


def generate_meal_plan_pdf(meal_plan: Dict[str, Any]) -> BytesIO:
    """Generate a PDF from meal plan"""
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter, title=f"{COMPANY_NAME} Meal Plan")
    styles = _styles()
    story: List[Any] = []

    preferences = meal_plan.get("preferences") or {}
    user_info = meal_plan.get("userInfo") or {}

    # Cover
    story.append(Paragraph(_text(COMPANY_NAME), styles["title"]))
    story.append(Paragraph("7-Day Personalized Meal Plan", styles["subtitle"]))
    story.append(Paragraph(f"<b>Prepared for:</b> {_text(user_info.get('name', ''))}", styles["normal"]))
    story.append(Paragraph(f"<b>Date:</b> {_created_on(meal_plan)}", styles["normal"]))
    story.append(Paragraph(f"<b>Goal:</b> {_text(GOAL_LABELS.get(preferences.get('goal'), ''))}", styles["normal"]))
    story.append(Paragraph(f"<b>Diet Type:</b> {_text(DIET_TYPE_LABELS.get(preferences.get('dietType'), ''))}", styles["normal"]))
    story.append(Spacer(1, 0.3*inch))

    if meal_plan.get("targetNutrition"):
        story.append(Paragraph("Daily Nutritional Targets", styles["heading"]))
        story.append(Paragraph(_nutrition_line(meal_plan["targetNutrition"]), styles["normal"]))
    story.append(PageBreak())

    for day in meal_plan.get("days", []):
        story.append(Paragraph(_text(day.get("dayName") or f"Day {day.get('day', '')}"), styles["heading"]))
        story.append(Spacer(1, 0.1*inch))

        # Meals table - use Paragraphs for text wrapping
        meal_data = [[
            Paragraph("<b>Meal</b>", styles["normal"]),
            Paragraph("<b>Time</b>", styles["normal"]),
            Paragraph("<b>Recipe</b>", styles["normal"]),
            Paragraph("<b>Calories</b>", styles["normal"])
        ]]
        for meal in day.get("meals", []):
            recipe = meal.get("recipe") or {}
            meal_data.append([
                Paragraph(_text(meal.get("name", "")), styles["cell"]),
                Paragraph(_text(meal.get("time", "")), styles["cell"]),
                Paragraph(_text(recipe.get("name", "")), styles["cell"]),
                Paragraph(str(_num((recipe.get("nutrition") or {}).get("calories"))), styles["cell"])
            ])

        table = Table(meal_data, colWidths=[1.2*inch, 0.9*inch, 4.2*inch, 0.9*inch])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(BRAND_PRIMARY)),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
            ('TOPPADDING', (0, 1), (-1, -1), 5),
            ('BOTTOMPADDING', (0, 1), (-1, -1), 5),
            ('BACKGROUND', (0, 1), (-1, -1), colors.HexColor(BRAND_LIGHT)),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ]))
        story.append(table)
        story.append(Spacer(1, 0.15*inch))

        # Full recipe details for each meal
        for meal in day.get("meals", []):
            recipe = meal.get("recipe") or {}
            story.append(Paragraph(
                f"<b>{_text(meal.get('name', ''))} - {_text(recipe.get('name', ''))}</b>", styles["recipe"]
            ))
            story.append(Paragraph(
                f"{_text(meal.get('time', ''))} | {_nutrition_line(recipe.get('nutrition'))}", styles["cell"]
            ))
            story.extend(_recipe_details(recipe, styles))

        story.append(Paragraph(f"<b>Daily Total: {_nutrition_line(day.get('totalNutrition'))}</b>", styles["normal"]))
        story.append(PageBreak())

    story.extend(_closing_page("Enjoy Your Journey!", styles))
    doc.build(story)
    buffer.seek(0)
    return buffer


def generate_recipe_book_pdf(recipe_book: Dict[str, Any]) -> BytesIO:
    """Generate a PDF from recipe book"""
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter, title=str(recipe_book.get("title") or "Recipe Book"))
    styles = _styles()
    story: List[Any] = []
    recipes = recipe_book.get("recipes", [])

    # Cover
    story.append(Paragraph(_text(COMPANY_NAME), styles["title"]))
    story.append(Paragraph(_text(recipe_book.get("title") or "Recipe Book"), styles["subtitle"]))
    if recipe_book.get("description"):
        story.append(Paragraph(_text(recipe_book["description"]), styles["centered"]))
    story.append(Spacer(1, 0.4*inch))

    # Table of contents
    story.append(Paragraph("Table of Contents", styles["heading"]))
    for idx, recipe in enumerate(recipes, 1):
        story.append(Paragraph(f"{idx}. {_text(recipe.get('name', ''))}", styles["normal"]))
    story.append(PageBreak())

    for recipe in recipes:
        story.append(Paragraph(_text(recipe.get("name", "")), styles["heading"]))
        if recipe.get("description"):
            story.append(Paragraph(f"<i>{_text(recipe['description'])}</i>", styles["normal"]))
        info = (f"Prep: {_num(recipe.get('prepTime'))} min | Cook: {_num(recipe.get('cookTime'))} min | "
                f"Servings: {_num(recipe.get('servings'))} | Difficulty: {_text(recipe.get('difficulty', ''))}")
        story.append(Paragraph(info, styles["cell"]))
        story.append(Paragraph(_nutrition_line(recipe.get("nutrition")), styles["cell"]))
        story.append(Spacer(1, 0.1*inch))
        story.extend(_recipe_details(recipe, styles))
        story.append(PageBreak())

    story.extend(_closing_page("Happy Cooking!", styles))
    doc.build(story)
    buffer.seek(0)
    return buffer
