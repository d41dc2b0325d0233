"""
Data layer for FootyExport.

Includes:
- Season addressing (`season`)
- Club / round model and source document parsing (`schema`)
- Swappable remote and local providers (`providers`)
- Season assembly and caching (`repository`)
- Club metadata scraping (`scraper`)
"""
