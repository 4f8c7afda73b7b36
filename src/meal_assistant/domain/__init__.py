"""
domain - Value objects, exceptions and ports.

No dependency on LangChain, HTTP clients or any adapter.
"""
