"""
Models package initialization.

This module ensures all models are imported and registered with SQLAlchemy
when the models package is loaded.
"""

# Import all models to ensure they are registered with SQLAlchemy
from .models import *

# Import Pydantic schemas
from .scheme import *
