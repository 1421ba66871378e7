from .loader import Metadata, decode_metadata, load_metadata

__all__ = ["Metadata", "decode_metadata", "load_metadata"]
