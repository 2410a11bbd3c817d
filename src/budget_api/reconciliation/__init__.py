"""Bank-sync reconciliation: normalize, classify, deduplicate and import."""
