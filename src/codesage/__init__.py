"""
CodeSage - AI-assisted Python code explanation and review.
"""

__version__ = "0.1.0"
