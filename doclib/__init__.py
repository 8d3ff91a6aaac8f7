"""
doclib: personal document knowledge base.

Ingests PDFs and Markdown, splits them into chunks, embeds them with a
local Ollama model and serves hybrid (vector + full-text) search with
context expansion over a single SQLite file.
"""

__version__ = "0.1.0"
