"""Data Quality Intelligence (DQI) engine.

Metadata-only quality assessment of tabular datasets across 7 dimensions
with composite scoring, explanations, recommendations, and an audit trail.

Deterministic; no LLM calls.
"""
