# coursereview/services/__init__.py
