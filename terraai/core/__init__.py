"""Configuration, caching, errors and shared helpers"""
