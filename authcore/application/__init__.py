# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .services.account_service import AccountService
from .services.password_hashing import WerkzeugPasswordHasher
from .services.session_manager import SessionManager

__all__ = [
    "AccountService",
    "SessionManager",
    "WerkzeugPasswordHasher",
]
