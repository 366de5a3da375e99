"""BayBridge Classroom - live parent/teacher updates over SSE with optional translation."""
