"""
Note Janitor - keeps markdown notes tidy for plain markdown readers.

Maintains an autogenerated block of reference-style link definitions at the
bottom of each note, mirroring the wiki links (``[[note]]``) the note
contains, and adds a top-level heading to notes that lack one.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("note-janitor")
except PackageNotFoundError:
    __version__ = "0.3.0"
