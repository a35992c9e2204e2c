# terraai/api/v1/__init__.py
