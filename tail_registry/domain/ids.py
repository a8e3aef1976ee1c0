from __future__ import annotations

import importlib

ulid_module = importlib.import_module("ulid")


def new_session_id() -> str:
    return f"sess_{ulid_module.new().str}"
