"""
FitFuel - AI meal plans and recipe books, streamed as they are generated
"""

__version__ = "1.0.0"
