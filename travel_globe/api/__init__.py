"""Core trip pipeline: record model, importer, codec, sanitizer, diagnostics."""
