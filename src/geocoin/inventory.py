"""The player's token stack and transfers between it and caches."""

from __future__ import annotations

import logging

from geocoin.cache import Cache
from geocoin.models import Token, TransferResult

_logger = logging.getLogger("geocoin.inventory")


class PlayerInventory:
    """Tokens held by the player; the last token collected is deposited first."""

    def __init__(self, tokens: list[Token] | None = None) -> None:
        self.tokens: list[Token] = list(tokens or [])

    def __len__(self) -> int:
        return len(self.tokens)

    def push(self, token: Token) -> None:
        self.tokens.append(token)

    def pop(self) -> Token | None:
        return self.tokens.pop() if self.tokens else None

    def peek(self) -> Token | None:
        return self.tokens[-1] if self.tokens else None

    def replace(self, tokens: list[Token]) -> None:
        self.tokens = list(tokens)

    def clear(self) -> None:
        self.tokens.clear()

    def collect_from(self, cache: Cache) -> TransferResult:
        """Move the cache's top token onto the inventory."""
        if not cache.tokens:
            _logger.info("collect_skipped", extra={"cache_key": cache.key})
            return TransferResult(cache_key=cache.key, moved=False, reason="cache is empty")
        token = cache.collect()
        self.push(token)
        _logger.info("token_collected", extra={"cache_key": cache.key, "token": token.key})
        return TransferResult(cache_key=cache.key, moved=True, token=token)

    def deposit_into(self, cache: Cache) -> TransferResult:
        """Move the inventory's top token onto the cache."""
        token = self.pop()
        if token is None:
            _logger.info("deposit_skipped", extra={"cache_key": cache.key})
            return TransferResult(cache_key=cache.key, moved=False, reason="inventory is empty")
        cache.deposit(token)
        _logger.info("token_deposited", extra={"cache_key": cache.key, "token": token.key})
        return TransferResult(cache_key=cache.key, moved=True, token=token)
