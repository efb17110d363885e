"""HTTP service for the aggregated addon repository."""
