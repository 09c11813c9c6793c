"""
Server configuration, read from the environment (and a local .env file)
"""

import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# LLM provider
TOGETHER_AI_API_KEY = os.getenv("TOGETHER_AI_API_KEY", "")
TOGETHER_AI_API_URL = os.getenv("TOGETHER_AI_API_URL", "https://api.together.xyz/v1/chat/completions")
TOGETHER_AI_MODEL = os.getenv("TOGETHER_AI_MODEL", "mistralai/Mixtral-8x7B-Instruct-v0.1")

STREAM_MAX_TOKENS = int(os.getenv("STREAM_MAX_TOKENS", "8000"))
LLM_MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", "2"))
LLM_RETRY_DELAY = float(os.getenv("LLM_RETRY_DELAY", "2"))  # seconds
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "120"))

# Image generation
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_IMAGES_URL = "https://api.openai.com/v1/images/generations"
IMAGE_MODEL = os.getenv("IMAGE_MODEL", "dall-e-3")

# Branding used in exported PDFs
COMPANY_NAME = os.getenv("COMPANY_NAME", "FitFuel")
COMPANY_TAGLINE = os.getenv("COMPANY_TAGLINE", "Personalized Nutrition, Powered by AI")
BRAND_PRIMARY = "#FF6B35"
BRAND_SECONDARY = "#F7931E"
BRAND_DARK = "#2E3440"
BRAND_LIGHT = "#ECEFF4"

# Storage (in production, use a database)
MAX_STORED_ITEMS = int(os.getenv("MAX_STORED_ITEMS", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8001"))
