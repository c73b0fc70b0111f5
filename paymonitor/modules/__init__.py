"""Feature modules: merchants, monitor ingestion, orders and scheduling."""
