"""Cortex — hierarchical memory store with per-category index records.

Layout:
    <store>/
    ├── index.yaml                     # Root record: top-level categories only
    ├── project/
    │   ├── index.yaml                 # Direct memories + subcategories of project
    │   ├── notes.md                   # Memory: YAML frontmatter + Markdown body
    │   └── cortex/
    │       ├── index.yaml
    │       └── architecture.md
    └── human/
        └── ...
"""

__version__ = "0.1.0"
