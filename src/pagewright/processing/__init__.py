"""HTML processing pipeline: extraction, sanitization, minification and validation."""
