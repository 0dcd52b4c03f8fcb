"""University course reviews: ratings, grade curves and moderated student content."""

__version__ = "0.1"
