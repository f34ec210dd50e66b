# SPDX-License-Identifier: GPL-3.0-or-later
#
# Copyright (C) 2025 The qaympy contributors
# This file is part of qaympy, distributed under the terms of the GNU GPLv3.

from importlib import metadata

from qaympy.base import QaymResponse, RestApiBaseClass
from qaympy.exceptions import (
    DecodeError,
    HttpStatusError,
    InvalidIdentifierError,
    QaympyException,
    TransportError,
)
from qaympy.logger import log_to_file, set_logging_level
from qaympy.qaym import API_URL, QaymAPI

__version__ = metadata.version("qaympy")

__all__ = [
    "API_URL",
    "QaymAPI",
    "QaymResponse",
    "RestApiBaseClass",
    "QaympyException",
    "TransportError",
    "HttpStatusError",
    "DecodeError",
    "InvalidIdentifierError",
    "set_logging_level",
    "log_to_file",
]
