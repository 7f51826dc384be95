from .natural_cmp import (
    natural_cmp,
    natural_key,
    natural_path_key,
    natural_paths_cmp,
    sort_names,
    tokenize,
)

__all__ = [
    "tokenize",
    "natural_key",
    "natural_cmp",
    "natural_path_key",
    "natural_paths_cmp",
    "sort_names",
]
