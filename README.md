# legalbot

Building blocks for a chat bot that takes a user's claim, asks a language
model about it, keeps the answer and replies in the chat over Telegram.
Chats can also list links to their latest answers, clear their history and
switch the language of the help text.

Only the Python standard library is needed (Python 3.10 or later).

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Commands

Two small HTTP services are installed. Each answers every request with `ok`
and logs the `X-Request-ID` header when a request carries one. Both take
`--listen` (also `-listen`) with an address such as `:8080` or
`127.0.0.1:8080`.

The bot webhook, on `:8080` by default:

```
export TELEGRAM_SECRET_TOKEN=secret
legalbot-bot --listen :8080
```

Requests whose `X-Telegram-Bot-Api-Secret-Token` header does not equal
`TELEGRAM_SECRET_TOKEN` get `401 Unauthorized`. A warning is logged at
start-up when the variable is not set.

The prompt service, on `:8090` by default:

```
legalbot-prompt --listen :8090
```

The WSGI applications behind them are available as
`legalbot.server.make_bot_app(secret, logger)` and
`legalbot.server.make_prompt_app(logger)`.

## Configuration

| Variable                | Read by                                  | Meaning                                                     |
|-------------------------|------------------------------------------|-------------------------------------------------------------|
| `TELEGRAM_SECRET_TOKEN` | `legalbot-bot`                           | Expected value of the webhook secret-token header           |
| `DOCS_BASE_URL`         | `legalbot.handler.load_docs_base_url`    | Base of the links sent by `handle_recent`                   |
| `POSTGRES_DSN`          | `legalbot.repo.connect`                  | Connection string for the result store; must be set         |
| `OPENROUTER_TIMEOUT`    | `legalbot.openrouter.OpenRouterClient`   | Request timeout such as `20s`; 15 seconds when unset or bad |
| `OPENROUTER_ENDPOINT`   | `legalbot.openrouter.OpenRouterClient`   | Chat-completion endpoint to call                            |

## Library overview

- `legalbot.help.message(lang)` returns the help text in `"en"` or `"ru"`,
  and the English text for any other language.
- `legalbot.limiter.RateLimiter(limit, window, now)` allows at most `limit`
  calls of `allow(user)` per user within a sliding window of `window`
  seconds (or a `timedelta`).
- `legalbot.pool.MemoryPool` is a thread-safe in-memory result store
  answering the repository's statements through `query_row`, `execute` and
  `query`; `parse_config(dsn)` gives a `PoolConfig`. A missing row raises
  `RowNotFoundError`.
- `legalbot.repo.Repository` saves, fetches, lists (newest first) and deletes
  `Result` records; failures raise `RepositoryError`. `connect()` builds a
  repository when `POSTGRES_DSN` is set and raises `RepositoryError` when it
  is not.
- `legalbot.openrouter.OpenRouterClient.chat_completion(prompt, request_id)`
  posts the prompt to the endpoint and returns the raw response body;
  failures and HTTP statuses of 400 and above raise `OpenRouterError`.
- `legalbot.telegram.TelegramClient.send_message(chat_id, text)` sends a
  message through the Telegram Bot API and raises `TelegramError` on HTTP
  errors or a reply that is not `ok`.
- `legalbot.handler` ties these together: `handle_claim`, `handle_recent`,
  `handle_delete`, `handle_lang`, `lang_for` and `check_secret_token`.

Claims longer than 8000 bytes raise `MessageTooLongError`. When the rate
limit is hit the chat is told to try again later. Failures of the model or of
the store are logged and the chat gets a short "temporary error" reply.

```python
from legalbot.help import message

print(message("ru"))
```

## What it does not do

- Results are kept only in memory by `MemoryPool`; `POSTGRES_DSN` is recorded
  in the pool's settings but no database is contacted, and everything stored
  is lost when the process exits.
- `legalbot-bot` checks the secret token and answers `ok`; it does not read
  Telegram updates or call the handlers. Wiring `legalbot.handler` to
  incoming messages is left to the application.