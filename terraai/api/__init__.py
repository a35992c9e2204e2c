# terraai/api/__init__.py
