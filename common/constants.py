"""Project-wide constants (key layout, chunk size, default modes)."""

import stat

# Key layout shared with every other client of the same store.
METADATA_SUFFIX: str = ".__meta__"
CHUNK_SUFFIX: str = ".chunk"
ROOT_PATH: str = "/"
ROOT_METADATA_KEY: str = "/.__meta__"
PATH_SEPARATOR: str = "/"

# HPKV rejects values longer than 3072; leave some room.
STORE_MAX_VALUE_SIZE: int = 3072
MAX_CHUNK_SIZE: int = 3000

DEFAULT_DIR_MODE: int = stat.S_IFDIR | 0o755  # 16877
DEFAULT_FILE_MODE: int = stat.S_IFREG | 0o644  # 33188

DEFAULT_UID: int = 1000
DEFAULT_GID: int = 1000

# Chunk bytes <-> stored text. Latin-1 maps every byte to one code point.
CHUNK_VALUE_ENCODING: str = "latin-1"

HPKV_API_KEY_HEADER: str = "hpkv-api-key"
HPKV_API_URL_HEADER: str = "hpkv-api-url"
HPKV_TIMEOUT_SECONDS: float = 10.0
HPKV_MAX_RETRIES: int = 2
HPKV_RETRY_BACKOFF_MULTIPLIER: float = 2.0

STORE_CONCURRENCY: int = 8
MEMORY_STORE_PAGE_SIZE: int = 100
