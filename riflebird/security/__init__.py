from .secret_scanner import SanitizationResult, SecretScanner

__all__ = ["SanitizationResult", "SecretScanner"]
