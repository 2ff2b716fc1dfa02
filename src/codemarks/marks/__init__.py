"""Mark tracking core: positions, translation, storage, and lifecycle."""

from .decorations import DecorationSet, DecorationStyle, MarkDecoration
from .listing import MarkListing, collect_listing
from .manager import MarkManager
from .names import GlobalName, LocalName, MarkName, parse_mark_name
from .positions import EditDescriptor, EditRange, Position
from .store import GlobalMark, LocalMark, MarkStore, OrphanedGlobalMark
from .translate import Relation, classify, translate, translate_all

__all__ = [
    "DecorationSet",
    "DecorationStyle",
    "MarkDecoration",
    "MarkListing",
    "collect_listing",
    "MarkManager",
    "GlobalName",
    "LocalName",
    "MarkName",
    "parse_mark_name",
    "EditDescriptor",
    "EditRange",
    "Position",
    "GlobalMark",
    "LocalMark",
    "MarkStore",
    "OrphanedGlobalMark",
    "Relation",
    "classify",
    "translate",
    "translate_all",
]
