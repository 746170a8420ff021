"""Host-side features built on the trainer core."""
