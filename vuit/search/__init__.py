"""File indexing, fuzzy filtering, content search and replace."""

from .content import ContentMatch, ContentSearchWorker, SearchJob
from .fuzzy import RankedMatch, filter_paths, fuzzy_score, rank_paths
from .index import FileIndex, walk_project_files
from .replace import ReplaceResult, replace_matches

__all__ = [
    "ContentMatch",
    "ContentSearchWorker",
    "FileIndex",
    "RankedMatch",
    "ReplaceResult",
    "SearchJob",
    "filter_paths",
    "fuzzy_score",
    "rank_paths",
    "replace_matches",
    "walk_project_files",
]
