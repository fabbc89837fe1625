"""
API server — HTTP surface over dev reputation scores.

Read endpoints serve the last persisted score; admin endpoints trigger a refresh.
"""
