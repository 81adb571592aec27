"""Product catalog service with rule-based segment filtering."""
