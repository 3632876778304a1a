"""
LexLingo - Gamified law-of-obligations learning platform.

Packages:
- schemas: Pydantic models for content and learner progress
- classroom: Runtime components (content, progress, gating, lessons)
- viewer: HTML fragments for the Streamlit front end
- utils: Content file helpers
"""

__version__ = "0.1.0"
