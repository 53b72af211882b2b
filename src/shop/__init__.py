"""Product catalog backend.

Products with image assets and a category tree, served over HTTP by FastAPI
and persisted through SQLModel.
"""

__version__ = "0.1.0"
