"""
Data access layer.

Design rules:
- Routes call ONLY functions in data.service.
- Every live query opens and closes its own Snowflake connection (see data.connection).
- Filter values are always bound parameters, never spliced into SQL text.
- Mock data is opt-in for local dev (USE_MOCK_DATA), never a fallback for a failed query.
- No env var reads here (config-only).
"""
