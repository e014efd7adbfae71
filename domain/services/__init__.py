from .storage_key_generator import StorageKeyGenerator, split_filename

__all__ = ["StorageKeyGenerator", "split_filename"]
