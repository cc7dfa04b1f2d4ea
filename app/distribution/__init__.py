"""Distribution report delivery package.

Formats per-friend debt summaries, renders them to PDF and emails one
report to every friend in a distribution, reporting a single
all-or-nothing outcome.
"""
