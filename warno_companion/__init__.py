"""Command-line and I/O layer around `warno_descriptor_extractor`."""
