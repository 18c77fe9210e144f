"""Infrastructure: record stores, logging, tracing, ids."""
