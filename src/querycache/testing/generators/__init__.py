"""Testing generators – hypothesis strategies for cache arguments and tags."""
from querycache.testing.generators.strategies import json_args, json_values, tags

__all__ = ["json_args", "json_values", "tags"]
