"""
Backend DevScore — reputation scoring for token-launching developers.

Aggregates each dev's launch history (rugs, successful launches, ATH market
caps, last activity) into a 0–100 score and tier, refreshes scores on a
schedule, and serves them over a read-mostly HTTP API.
"""

__version__ = "0.1.0"
