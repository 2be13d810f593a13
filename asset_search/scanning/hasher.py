import hashlib
from pathlib import Path

from .. import config
from ..exceptions import FileHashError

class FileHasher:
    def checksum(self, path: Path) -> str:
        """
        Computes the digest of the whole file, prefixed with the algorithm
        name and a hyphen (e.g. sha256-9f86d0...).

        Raises:
            FileHashError: the file could not be read.
        """
        h = hashlib.new(config.HASH_ALGORITHM)
        try:
            with open(path, 'rb') as f:
                while chunk := f.read(config.HASH_CHUNK_SIZE):
                    h.update(chunk)
        except OSError as e:
            raise FileHashError(f"Cannot hash {path}: {e}") from e
        return f"{config.HASH_ALGORITHM}-{h.hexdigest()}"
