"""
Client-facing error strings, keyed by exception `code`.

The wire contract only promises a human-readable `error` string. English is
the default; the Russian catalogue carries the strings the front end was
originally written against.
"""

from typing import Dict

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "missing_fields": "missing fields",
        "invalid_login_format": "invalid login format",
        "invalid_request": "invalid request",
        "user_exists": "user exists",
        "unknown_action": "unknown action",
        "user_not_found": "user not found",
        "wrong_password": "wrong password",
        "method_not_allowed": "method not allowed",
        "internal_error": "internal server error",
    },
    "ru": {
        "missing_fields": "Заполните все поля",
        "invalid_login_format": "Логин: только латинские буквы, цифры и _",
        "invalid_request": "Некорректный запрос",
        "user_exists": "Пользователь уже существует",
        "unknown_action": "Неизвестное действие",
        "user_not_found": "Пользователь не найден",
        "wrong_password": "Неверный пароль",
        "method_not_allowed": "Метод не поддерживается",
        "internal_error": "Внутренняя ошибка сервера",
    },
}


def translate(code: str, language: str = "en") -> str:
    """Return the message for `code`, falling back to English, then to the generic error."""
    catalogue = MESSAGES.get(language, MESSAGES["en"])
    if code in catalogue:
        return catalogue[code]
    return MESSAGES["en"].get(code, MESSAGES["en"]["internal_error"])
