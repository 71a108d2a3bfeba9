from .handler import ThoughtsApi, lambda_handler

__all__ = ["ThoughtsApi", "lambda_handler"]
