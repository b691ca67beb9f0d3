"""darkrealm: rules core for a gothic browser role-playing game.

Combat resolution, progression, loot and quest tracking over immutable
character snapshots, plus a service layer shared by the HTTP backend and the
offline mode.
"""

__version__ = "0.1.0"
