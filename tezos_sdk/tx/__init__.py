"""Operation construction, fee estimation, forging and submission."""
