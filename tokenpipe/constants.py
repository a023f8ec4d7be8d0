from __future__ import annotations

import logging

HTTP_METHODS = {
    "get",
    "post",
    "put",
    "patch",
    "delete",
    "options",
    "head",
    "trace",
}

LOGGER = logging.getLogger("tokenpipe.http")
APP_VERSION = "0.1.0"

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT_SECONDS = 20.0
DEFAULT_HEADERS = {"accept": "application/json"}
JSON_HEADERS = {"content-type": "application/json"}
