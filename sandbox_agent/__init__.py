"""
Sandbox agent: LLM tools that list, read, create and edit files of a remote sandbox.
"""

__version__ = "0.1.0"
