"""movewiki — a small community wiki for tabletop moves.

Provides server-rendered pages for submitting moves and listings,
voting on them, previewing markdown definitions, browsing by tag and
an RSS feed of recent moves.
"""
