"""
Config values used across the backend.

Most of these are simple defaults. If an env var is present we use that instead.
"""

import os

# Placeholder cover image for books registered without one
DEFAULT_IMAGE_URL: str = os.getenv("DEFAULT_IMAGE_URL", "http://example.com/")

# Messages shown on the error pages (details are only logged)
ERROR_MESSAGE: str = os.getenv("ERROR_MESSAGE", "エラーが発生しました.")
NOT_FOUND_MESSAGE: str = os.getenv("NOT_FOUND_MESSAGE", "本が見つかりませんでした.")

# Validation message for a missing book title
TITLE_REQUIRED_MESSAGE: str = "本のタイトルが入っていません"

# Redirect targets
BOOKS_PATH: str = "/books/"
