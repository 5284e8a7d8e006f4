"""Canvas-side element handling: normalization, reconciliation, sync and export."""
