"""Memory files: frontmatter format, value types and the store that keeps indexes in sync."""
