from .app_protocol import compile_full_rewrite_batch

__all__ = ["compile_full_rewrite_batch"]
