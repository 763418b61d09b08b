"""Console configuration (rules.yaml) loading and schema."""
