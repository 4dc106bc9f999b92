"""Help text shown to bot users."""

DEFAULT_LANGUAGE = "en"

_POLICY_URL = "https://example.com/legalbot/DATA_POLICY.md"

_COMMANDS = ("start", "help", "claim", "status", "delete", "lang")

_LOCALES = {
    "en": {
        "heading": "Available commands",
        "policy": "Data policy",
        "commands": (
            "start the bot",
            "show this message",
            "submit a claim",
            "check status",
            "delete your history",
            "switch language",
        ),
    },
    "ru": {
        "heading": "Доступные команды",
        "policy": "Политика данных",
        "commands": (
            "запустить бота",
            "показать это сообщение",
            "подать обращение",
            "проверить статус",
            "удалить историю",
            "сменить язык",
        ),
    },
}


def _render(locale: dict) -> str:
    listing = [
        f"/{command} - {description}"
        for command, description in zip(_COMMANDS, locale["commands"])
    ]
    return "\n".join(
        [f"{locale['heading']}:", *listing, "", f"{locale['policy']}: {_POLICY_URL}"]
    )


_MESSAGES = {lang: _render(locale) for lang, locale in _LOCALES.items()}


def message(lang: str) -> str:
    """Return the help text in ``lang``, falling back to English."""
    return _MESSAGES.get(lang, _MESSAGES[DEFAULT_LANGUAGE])