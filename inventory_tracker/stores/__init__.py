"""Storage backends: in-memory (``stores.memory``) and relational (``stores.sql``)."""
