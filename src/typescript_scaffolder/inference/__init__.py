from .adapter import infer_interface, infer_interface_from_path
from .dedup import PREFIX_DELIMITER, find_duplicate_keys, prefix_duplicate_keys, strip_prefix

__all__ = [
    "PREFIX_DELIMITER",
    "find_duplicate_keys",
    "infer_interface",
    "infer_interface_from_path",
    "prefix_duplicate_keys",
    "strip_prefix",
]
