"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks that several features use (DB wiring,
settings, error base classes, file helpers). Item SQL lives in `items/`,
content generation lives in `content/` and the image store in `assets/`.
"""
