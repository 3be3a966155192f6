"""Record writes: field normalisation, status and retention derivation."""
