"""Shared utilities package for the Participant Intake application.

This package contains code used by both the backend Flask API and the client
intake library. It includes:

- Database models (models.py) - SQLAlchemy models for participants and their images
- Enums (enums.py) - Image slot keys, yes/no answers and slot categories
- Validation utilities (validation.py, schemas.py) - Input validation and sanitization
- Utility functions (utils.py) - Image hashing, thumbnails and previews

All shared components are designed to work identically in both backend and client contexts.
"""
