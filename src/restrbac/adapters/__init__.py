"""Framework adapters. Each submodule imports its framework lazily."""
