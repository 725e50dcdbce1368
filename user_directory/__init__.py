"""User directory service: filtered user records over a durable or in-memory store."""
