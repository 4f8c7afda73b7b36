"""
infrastructure - Concrete implementations of the domain ports.

Config, LLM construction, recipe/search/profile HTTP clients and the
in-memory session store.
"""
