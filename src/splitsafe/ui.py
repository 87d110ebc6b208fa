"""Presentation helpers and interactive prompts."""

import logging
from decimal import Decimal
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}


def format_currency(amount: Decimal | float, currency_code: str = "USD") -> str:
    """
    Format an amount with currency symbol, thousands separators and 2 decimals.

    Example:
        format_currency(Decimal("-1234.5")) == "-$1,234.50"
    """
    symbol = CURRENCY_SYMBOLS.get(currency_code.upper(), f"{currency_code.upper()} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_address(member: str) -> str:
    """
    Shorten a member identifier for display.

    Wallet addresses (0x + 40 hex chars) become "0x1234...abcd"; any other
    identifier longer than 20 characters is cut to 17 characters plus "...".
    """
    if member.startswith("0x") and len(member) == 42:
        return f"{member[:6]}...{member[-4:]}"
    return f"{member[:17]}..." if len(member) > 20 else member


class MemberCompleter(Completer):
    """Fuzzy search completer for group members."""

    def __init__(self, members: list[str]):
        """Initialize the completer with the group roster."""
        self.members = members

    def get_completions(self, document: Document, complete_event: Any):
        """Get fuzzy-matched completions."""
        query = document.text.lower()

        for member in self.members:
            if not query or self._fuzzy_match(query, member.lower()):
                yield Completion(
                    text=member,
                    start_position=-len(document.text),
                    display=format_address(member),
                )

    def _fuzzy_match(self, query: str, text: str) -> bool:
        """
        Fuzzy match: all characters in query must appear in order in text.

        Example:
            query="ale" matches "alice"
            query="0xab" matches "0x12ab..."
        """
        query_idx = 0
        for char in text:
            if query_idx < len(query) and char == query[query_idx]:
                query_idx += 1
        return query_idx == len(query)


def select_member_interactive(members: list[str], label: str = "Payer") -> str | None:
    """
    Interactive member selection with fuzzy search.

    Args:
        members: Group roster
        label: Prompt label

    Returns:
        Selected member, or None to cancel
    """
    print("   Type to search, press Enter to confirm, Ctrl+C to cancel\n")

    completer = MemberCompleter(members)
    session: PromptSession[str] = PromptSession(completer=completer)

    try:
        while True:
            result = session.prompt(f"{label}: ", complete_while_typing=True).strip()

            if not result:
                return None

            if result in members:
                logger.info(f"User selected member: {result}")
                return result

            print("❌ Not a group member. Press Tab to see the roster.")

    except KeyboardInterrupt:
        print("\n⏭️  Cancelled")
        return None
    except EOFError:
        return None
