#!/usr/bin/env python3
"""
Secret Scanner
==============

Pattern-based redaction of credentials in project files. Every file read on
behalf of the model passes through here, so a requested `.env` or config
file never reaches the provider with live keys in it.

Only counts and types are logged, never the values.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Tuple

logger = logging.getLogger("SecretScanner")


@dataclass(frozen=True)
class SecretPattern:
    type: str
    pattern: Pattern[str]
    description: str
    # Placeholder-looking text around the match cancels it
    context_required: bool = False


SECRET_PATTERNS: Tuple[SecretPattern, ...] = (
    SecretPattern("AWS_KEY", re.compile(r"AKIA[0-9A-Z]{16}"), "AWS Access Key ID"),
    SecretPattern(
        "AWS_KEY",
        re.compile(
            r"(?:aws_secret_access_key|aws_session_token)\s*[:=]\s*[\"']([A-Za-z0-9/+=]{40,})[\"']",
            re.IGNORECASE,
        ),
        "AWS Secret Access Key",
    ),
    SecretPattern("GITHUB_TOKEN", re.compile(r"gh[pos]_[a-zA-Z0-9]{36}"), "GitHub Token"),
    SecretPattern("STRIPE_KEY", re.compile(r"[sp]k_(?:live|test)_[a-zA-Z0-9]{24,}"), "Stripe Key"),
    SecretPattern("API_KEY", re.compile(r"sk-[a-zA-Z0-9_-]{20,}"), "API Key (sk- prefix)"),
    SecretPattern("SENDGRID_KEY", re.compile(r"SG\.[a-zA-Z0-9_.-]{22,}"), "SendGrid API Key"),
    SecretPattern("TWILIO_KEY", re.compile(r"(?:AC|SK)[a-zA-Z0-9]{32}"), "Twilio SID"),
    SecretPattern("MAILGUN_KEY", re.compile(r"key-[a-z0-9]{32}"), "Mailgun API Key"),
    SecretPattern(
        "PRIVATE_KEY",
        re.compile(
            r"-----BEGIN (?:RSA |DSA |EC |OPENSSH |PGP )?PRIVATE KEY-----[\s\S]*?"
            r"-----END (?:RSA |DSA |EC |OPENSSH |PGP )?PRIVATE KEY-----"
        ),
        "Private Key",
    ),
    SecretPattern(
        "API_KEY",
        re.compile(
            r"(?:api[_-]?key|apikey|api[_-]?secret|secret[_-]?key)\s*[:=]\s*[\"']([A-Za-z0-9_-]{32,})[\"']",
            re.IGNORECASE,
        ),
        "Generic API Key",
    ),
    SecretPattern(
        "JWT_TOKEN",
        re.compile(r"eyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}"),
        "JWT Token",
    ),
    SecretPattern(
        "OAUTH_TOKEN",
        re.compile(
            r"(?:oauth[_-]?token|access[_-]?token|bearer[_-]?token)\s*[:=]\s*[\"']([A-Za-z0-9_.-]{20,})[\"']",
            re.IGNORECASE,
        ),
        "OAuth/Access Token",
    ),
    SecretPattern(
        "DATABASE_URL",
        re.compile(
            r"(?:postgres(?:ql)?|mysql|mongodb(?:\+srv)?|redis)://[^\s:\"']+:[^\s@\"']+@[^\s/\"']+(?::\d+)?(?:/[^\s\"']*)?",
            re.IGNORECASE,
        ),
        "Database Connection String",
    ),
    SecretPattern(
        "PASSWORD",
        re.compile(
            r"(?:password|passwd|pwd)\s*[:=]\s*[\"']([A-Za-z0-9!@#$%^&*()_+\-=\[\]{};:,.<>?]{8,128})[\"']",
            re.IGNORECASE,
        ),
        "Password",
        context_required=True,
    ),
    SecretPattern(
        "ENV_VAR",
        re.compile(r"^[A-Z][A-Z0-9_]*(?:KEY|TOKEN|SECRET|PASSWORD)\s*=\s*[\"']?([^\"'\s#]{10,})", re.MULTILINE),
        "Environment Variable Assignment",
    ),
)

FALSE_POSITIVE_PATTERNS: Tuple[Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"example",
        r"placeholder",
        r"your[_-]?(?:key|token|password)",
        r"dummy",
        r"fake",
        r"sample",
        r"xxx+",
        r"\*\*\*",
        r"\[REDACTED",
    )
)

SCANNABLE_EXTENSIONS: Tuple[str, ...] = (
    ".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs", ".mts", ".cts",
    ".py", ".go", ".java", ".rb", ".php",
    ".env", ".config", ".json", ".yaml", ".yml", ".toml", ".ini",
    ".pem", ".key", ".cert",
)

EXCLUDED_PATH_PATTERNS: Tuple[Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (r"(?:^|/)node_modules/", r"(?:^|/)\.git/", r"\.min\.", r"\.map$")
)


@dataclass(frozen=True)
class DetectedSecret:
    type: str
    description: str
    start: int
    end: int
    line: int
    redacted_value: str


@dataclass
class SanitizationResult:
    sanitized_code: str
    secrets: List[DetectedSecret] = field(default_factory=list)

    @property
    def secrets_detected(self) -> int:
        return len(self.secrets)


class SecretScanner:
    """Finds and redacts credentials. Stateless; all methods are classmethods."""

    @classmethod
    def should_scan_file(cls, file_path: str) -> bool:
        path = file_path.replace("\\", "/")
        if any(p.search(path) for p in EXCLUDED_PATH_PATTERNS):
            return False
        name = path.rsplit("/", 1)[-1]
        # .env, .env.local, .env.production ...
        if name == ".env" or name.startswith(".env."):
            return True
        return name.endswith(SCANNABLE_EXTENSIONS)

    @staticmethod
    def _is_false_positive(text: str) -> bool:
        return any(p.search(text) for p in FALSE_POSITIVE_PATTERNS)

    @staticmethod
    def _redacted_value(secret_type: str, value: str) -> str:
        suffix = value[-3:] if len(value) > 3 else "xxx"
        return f"[REDACTED_{secret_type}_{suffix}]"

    @classmethod
    def scan(cls, code: str, file_path: Optional[str] = None) -> List[DetectedSecret]:
        """
        Detected secrets in ascending position order.

        Overlapping matches keep the first pattern that claimed the span.
        For patterns with a capture group only the group is the secret.
        """
        if file_path is not None and not cls.should_scan_file(file_path):
            return []

        found: List[DetectedSecret] = []
        for spec in SECRET_PATTERNS:
            for match in spec.pattern.finditer(code):
                group = 1 if match.re.groups and match.group(1) is not None else 0
                start, end = match.span(group)
                value = match.group(group)

                if cls._is_false_positive(value):
                    continue
                if spec.context_required:
                    context = code[max(0, match.start() - 50) : match.end() + 50]
                    if cls._is_false_positive(context):
                        continue
                if any(start < s.end and s.start < end for s in found):
                    continue

                found.append(
                    DetectedSecret(
                        type=spec.type,
                        description=spec.description,
                        start=start,
                        end=end,
                        line=code.count("\n", 0, start) + 1,
                        redacted_value=cls._redacted_value(spec.type, value),
                    )
                )
        return sorted(found, key=lambda s: s.start)

    @classmethod
    def sanitize(cls, code: str, file_path: Optional[str] = None) -> SanitizationResult:
        secrets = cls.scan(code, file_path)
        if not secrets:
            return SanitizationResult(sanitized_code=code)

        parts = []
        cursor = 0
        for secret in secrets:
            parts.append(code[cursor : secret.start])
            parts.append(secret.redacted_value)
            cursor = secret.end
        parts.append(code[cursor:])

        result = SanitizationResult(sanitized_code="".join(parts), secrets=secrets)
        counts = Counter(s.type for s in secrets)
        logger.warning(
            "Redacted %d secret(s) from %s: %s",
            result.secrets_detected,
            file_path or "<content>",
            ", ".join(f"{t} x{n}" for t, n in sorted(counts.items())),
        )
        return result

    @classmethod
    def has_secrets(cls, code: str, file_path: Optional[str] = None) -> bool:
        return bool(cls.scan(code, file_path))
