from .session import build_engine, engine_lock, get_engine, init_db

__all__ = ["build_engine", "engine_lock", "get_engine", "init_db"]
