"""docrag — conversation-scoped retrieval-augmented generation over user documents."""
