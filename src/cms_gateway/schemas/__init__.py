"""Pydantic response models and upstream CMS shapes."""
