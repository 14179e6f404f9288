"""
npm-statistic: track npm package statistics month by month.

Layers:
- domain: JSON path addressing, period keys, models, errors
- storage: JSON document store
- data: config.json / stats/ locations and the statistics file manager
- services: npm fetcher and the statistics updater
- commands.py / main.py: command dispatch and CLI entry point
"""

__version__ = "0.1.0"
