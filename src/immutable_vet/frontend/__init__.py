"""Adapters to the collaborators: type-checker facts, package specs and source markers."""

from .facts import decode_facts, parse_facts, read_facts_file
from .markers import GoCommentReader, MarkerRecognizer, SourceMarkers, is_generated_name
from .packages import PackageTarget, expand_specs, load_target, run_exporter

__all__ = [
    "GoCommentReader",
    "MarkerRecognizer",
    "PackageTarget",
    "SourceMarkers",
    "decode_facts",
    "expand_specs",
    "is_generated_name",
    "load_target",
    "parse_facts",
    "read_facts_file",
    "run_exporter",
]
