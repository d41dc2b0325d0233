"""
FootyExport: build one season's fixture dataset and export it as CSV.

Subpackages:
- `data` addresses seasons, fetches clubs and rounds from a provider and
  scrapes optional club metadata.
- `features` turns a season into per-match training and test rows.
- `export` writes row-sets to CSV and drives a full export run.
"""

__version__ = "0.1.0"
