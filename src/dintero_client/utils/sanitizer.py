# src/dintero_client/utils/sanitizer.py
"""
Маскирование учётных данных и платёжных данных перед логированием.

Authorization значения (``Token ...``, ``Bearer ...``, ``Basic ...``),
client secret и данные карт не должны попадать в логи.
"""

import re
from typing import Any, Dict, FrozenSet, Mapping

MASK = "***REDACTED***"

# Ключи, значения которых маскируются целиком (сравнение без учёта регистра)
SENSITIVE_KEYS: FrozenSet[str] = frozenset({
    'authorization', 'proxy-authorization', 'cookie', 'set-cookie',
    'api_key', 'apikey', 'x-api-key',
    'token', 'jwt', 'access_token', 'refresh_token', 'id_token',
    'client_secret', 'secret', 'password',
    'card_number', 'pan', 'cvc', 'cvv', 'expiry_date',
})

# Подстроки ключей, которые тоже считаются чувствительными
SENSITIVE_KEY_PARTS = ('secret', 'password', 'token', 'api_key')

SENSITIVE_PATTERNS = [
    # Значения Authorization заголовка
    (re.compile(r'\b(Bearer|Token|Basic)(\s+)[A-Za-z0-9\-._~+/]+=*', re.IGNORECASE),
     r'\1\2' + MASK),
    # key=value в query/тексте
    (re.compile(r'\b((?:api[_-]?key|access_token|client_secret|token|password)[\s:=]+)[^\s&,;"]+',
                re.IGNORECASE),
     r'\1' + MASK),
]


def is_sensitive_key(key: Any) -> bool:
    """Является ли ключ чувствительным."""
    key_lower = str(key).lower()
    if key_lower in SENSITIVE_KEYS:
        return True
    return any(part in key_lower for part in SENSITIVE_KEY_PARTS)


def mask_string(text: str, mask: str = MASK) -> str:
    """
    Маскирует учётные данные внутри строки.

    Examples:
        >>> mask_string("Authorization: Bearer eyJhbGciOi")
        'Authorization: Bearer ***REDACTED***'
    """
    for pattern, replacement in SENSITIVE_PATTERNS:
        replacement = replacement.replace(MASK, mask)
        text = pattern.sub(replacement, text)
    return text


def mask_sensitive_data(data: Any, mask: str = MASK) -> Any:
    """
    Рекурсивно маскирует чувствительные данные в dict/list/str.

    Возвращает копию, исходные данные не изменяются.

    Examples:
        >>> mask_sensitive_data({"client_id": "abc", "client_secret": "s3cr3t"})
        {'client_id': 'abc', 'client_secret': '***REDACTED***'}
    """
    if data is None or isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, str):
        return mask_string(data, mask)

    if isinstance(data, Mapping):
        return {
            key: mask if is_sensitive_key(key) else mask_sensitive_data(value, mask)
            for key, value in data.items()
        }

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)

    return data


def mask_headers(headers: Mapping[str, str], mask: str = MASK) -> Dict[str, str]:
    """
    Маскирует заголовки HTTP запроса.

    Examples:
        >>> mask_headers({"Authorization": "Token abc", "Accept": "application/json"})
        {'Authorization': '***REDACTED***', 'Accept': 'application/json'}
    """
    return {
        key: mask if is_sensitive_key(key) else value
        for key, value in headers.items()
    }
