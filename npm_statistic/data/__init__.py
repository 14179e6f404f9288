"""
On-disk state of npm-statistic.

This package is responsible for:
* Determining the base directory (via env var + current directory default).
* Creating config.json and the stats/ directory on first run.
* Loading config.json and the tool settings stored inside it.
* Creating, loading and saving the monthly statistics files.
"""
