"""CineMatch.

A conversational movie recommender: filtered catalog search, mood-based
recommendations, similar-movie lookups, per-user watchlists and an LLM
chat assistant that can query the catalog.
"""

__version__ = "0.1.0"
