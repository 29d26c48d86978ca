"""A console dashboard for the Lius FinTech service.

This module is the interactive front end of the service.  It talks to
the HTTP API through :class:`lius_fintech_client.LiusFintechAPI` and
offers the same screens as the web pages:

* Register a new account (with password confirmation).
* Log in and out.
* Show the current balance.
* Send money to another user by username.
* Show the transaction history, newest first.
* Change the password and set or clear the transfer PIN.

All state of the logged-in user lives in a :class:`DashboardSession`
that is passed explicitly to every handler.  While a user is logged
in, a background poller refreshes balance and history every 30
seconds.

Configuration:

``LIUS_FINTECH_BASE_URL``
    Base URL of the API, including the ``/api`` prefix.  Defaults to
    ``http://localhost:8000/api``.  Can be overridden with
    ``--base-url``.

Usage::

    python dashboard_console.py --base-url http://localhost:8000/api
"""

from __future__ import annotations

import argparse
import getpass
import logging
import math
import os
import shlex
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from lius_fintech_client import LiusFintechAPI


logger = logging.getLogger(__name__)

REFRESH_INTERVAL = 30
DEFAULT_BASE_URL = "http://localhost:8000/api"

Outcome = Tuple[bool, str]


@dataclass
class DashboardSession:
    """Everything the dashboard knows about the logged-in user."""

    api: LiusFintechAPI
    user: Optional[Dict[str, Any]] = None
    transactions: List[Dict[str, Any]] = field(default_factory=list)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def logged_in(self) -> bool:
        return self.user is not None

    @property
    def balance(self) -> float:
        return float(self.user["balance"]) if self.user else 0.0


# ----------------------------------------------------------------------
# Handlers
# ----------------------------------------------------------------------
def handle_register(session: DashboardSession, username: str, password: str, confirm_password: str) -> Outcome:
    username = username.strip()
    if password != confirm_password:
        return False, "Passwords do not match"
    _, error = session.api.register(username, password)
    if error:
        return False, error["message"]
    return True, "Account created successfully! You can now login."


def handle_login(session: DashboardSession, username: str, password: str) -> Outcome:
    data, error = session.api.login(username.strip(), password)
    if error:
        return False, error["message"]
    with session.lock:
        session.user = dict(data["user"])
        session.transactions = []
    load_transactions(session)
    return True, "Login successful!"


def logout(session: DashboardSession) -> None:
    with session.lock:
        session.user = None
        session.transactions = []


def refresh_balance(session: DashboardSession) -> bool:
    """Fetch the balance from the server and update the session."""
    if not session.logged_in:
        return False
    data, error = session.api.get_balance(session.user["id"])
    if error:
        logger.error("Failed to fetch balance: %s", error["message"])
        return False
    with session.lock:
        if session.user is not None:
            session.user["balance"] = data["balance"]
    return True


def load_transactions(session: DashboardSession) -> bool:
    """Fetch the transaction history and update the session."""
    if not session.logged_in:
        return False
    data, error = session.api.list_transactions(session.user["id"])
    if error:
        logger.error("Failed to fetch transactions: %s", error["message"])
        return False
    with session.lock:
        session.transactions = list(data["transactions"])
    return True


def handle_transfer(session: DashboardSession, recipient: str, amount_text: str,
                    pin: Optional[str] = None) -> Outcome:
    """Validate the form locally, send the transfer and refresh the views."""
    if not session.logged_in:
        return False, "Please log in first"
    recipient = recipient.strip()
    if not recipient:
        return False, "Please enter recipient username"
    try:
        amount = float(amount_text)
    except (TypeError, ValueError):
        return False, "Please enter a valid amount"
    if not math.isfinite(amount) or amount <= 0:
        return False, "Please enter a valid amount"
    if amount > session.balance:
        return False, "Insufficient balance"

    _, error = session.api.transfer(session.user["id"], recipient, amount, pin=pin)
    if error:
        return False, error["message"]
    refresh_balance(session)
    load_transactions(session)
    return True, f"Successfully sent ${amount:.2f} to {recipient}"


def handle_change_password(session: DashboardSession, current_password: str, new_password: str) -> Outcome:
    if not session.logged_in:
        return False, "Please log in first"
    _, error = session.api.change_password(session.user["id"], current_password, new_password)
    if error:
        return False, error["message"]
    return True, "Password updated"


def handle_set_pin(session: DashboardSession, password: str, pin: Optional[str]) -> Outcome:
    if not session.logged_in:
        return False, "Please log in first"
    data, error = session.api.set_pin(session.user["id"], password, pin or None)
    if error:
        return False, error["message"]
    return True, data.get("message") or "PIN updated"


# ----------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------
def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''} ago"


def format_date(value: str, now: Optional[datetime] = None) -> str:
    """Render an ISO timestamp relative to ``now``."""
    date = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    seconds = (now - date).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return _plural(minutes, "minute")
    if hours < 24:
        return _plural(hours, "hour")
    if days < 7:
        return _plural(days, "day")
    if date.year != now.year:
        return f"{date:%b} {date.day}, {date.year}"
    return f"{date:%b} {date.day}"


def format_transaction(transaction: Dict[str, Any], now: Optional[datetime] = None) -> str:
    sent = transaction["type"] == "sent"
    other = transaction["toUsername"] if sent else transaction["fromUsername"]
    label = "Sent to" if sent else "Received from"
    sign = "-" if sent else "+"
    amount = float(transaction["amount"])
    return f"{label} {other:<20} {sign}${amount:,.2f}  ({format_date(transaction['date'], now)})"


def render_dashboard(session: DashboardSession, now: Optional[datetime] = None) -> str:
    if not session.logged_in:
        return "Not logged in."
    with session.lock:
        lines = [
            f"Welcome, {session.user['username']}",
            f"Balance: ${session.balance:,.2f}",
            "",
            "Recent transactions:",
        ]
        if not session.transactions:
            lines.append("  No transactions yet")
            lines.append("  Start by sending money to someone!")
        else:
            lines.extend(f"  {format_transaction(t, now)}" for t in session.transactions)
    return "\n".join(lines)


# ----------------------------------------------------------------------
# Background refresh
# ----------------------------------------------------------------------
class Poller:
    """Refresh balance and history on a fixed interval while logged in."""

    def __init__(self, session: DashboardSession, interval: float = REFRESH_INTERVAL) -> None:
        self.session = session
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def poll_once(self) -> None:
        if self.session.logged_in:
            refresh_balance(self.session)
            load_transactions(self.session)

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.poll_once()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="dashboard-poller", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=max(self.interval, 5))
            self._thread = None


# ----------------------------------------------------------------------
# Interactive loop
# ----------------------------------------------------------------------
HELP_TEXT = """Commands:
  register                 create an account
  login                    log in
  logout                   log out
  show                     show balance and recent transactions
  balance                  refresh the balance
  history                  refresh the transaction history
  send <username> <amount> send money
  password                 change your password
  pin                      set or clear your transfer PIN
  help                     show this help
  quit                     exit"""


class ConsoleDashboard:
    """Read commands from stdin and dispatch them to the handlers."""

    def __init__(self, api: LiusFintechAPI, *, input_fn: Callable[[str], str] = input,
                 secret_fn: Callable[[str], str] = getpass.getpass,
                 output_fn: Callable[[str], None] = print) -> None:
        self.session = DashboardSession(api=api)
        self.poller = Poller(self.session)
        self.input = input_fn
        self.secret = secret_fn
        self.output = output_fn

    def _report(self, outcome: Outcome) -> None:
        ok, message = outcome
        self.output(message if ok else f"Error: {message}")

    def dispatch(self, line: str) -> bool:
        """Run one command.  Returns ``False`` when the user quits."""
        try:
            parts = shlex.split(line)
        except ValueError:
            self.output("Error: unbalanced quotes")
            return True
        if not parts:
            return True
        command, args = parts[0].lower(), parts[1:]
        session = self.session

        if command in ("quit", "exit"):
            return False
        if command == "help":
            self.output(HELP_TEXT)
        elif command == "register":
            username = self.input("Username: ")
            password = self.secret("Password: ")
            confirm = self.secret("Confirm password: ")
            self._report(handle_register(session, username, password, confirm))
        elif command == "login":
            username = self.input("Username: ")
            password = self.secret("Password: ")
            outcome = handle_login(session, username, password)
            self._report(outcome)
            if outcome[0]:
                self.poller.start()
                self.output(render_dashboard(session))
        elif command == "logout":
            self.poller.stop()
            logout(session)
            self.output("Logged out.")
        elif not session.logged_in:
            self.output("Please log in first (type 'help' for commands).")
        elif command == "show":
            self.output(render_dashboard(session))
        elif command == "balance":
            if refresh_balance(session):
                self.output(f"Balance: ${session.balance:,.2f}")
            else:
                self.output("Error: could not refresh balance")
        elif command == "history":
            load_transactions(session)
            self.output(render_dashboard(session))
        elif command == "send":
            if len(args) != 2:
                self.output("Usage: send <username> <amount>")
                return True
            pin = self.secret("PIN (leave empty if none): ") or None
            self._report(handle_transfer(session, args[0], args[1], pin=pin))
        elif command == "password":
            current = self.secret("Current password: ")
            new = self.secret("New password: ")
            self._report(handle_change_password(session, current, new))
        elif command == "pin":
            password = self.secret("Password: ")
            pin = self.secret("New PIN (leave empty to remove): ")
            self._report(handle_set_pin(session, password, pin))
        else:
            self.output(f"Unknown command: {command} (type 'help')")
        return True

    def run(self) -> None:
        logger.info("Connected to %s", self.session.api.base_url)
        self.output(HELP_TEXT)
        try:
            while True:
                try:
                    line = self.input("> ")
                except EOFError:
                    break
                if not self.dispatch(line):
                    break
        except KeyboardInterrupt:
            pass
        finally:
            self.poller.stop()
            logger.info("Dashboard stopped.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Lius FinTech console dashboard.")
    parser.add_argument(
        "--base-url",
        default=os.getenv("LIUS_FINTECH_BASE_URL", DEFAULT_BASE_URL),
        help="API base URL including the /api prefix",
    )
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "WARNING"))
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s [%(levelname)s] %(message)s")
    ConsoleDashboard(LiusFintechAPI(base_url=args.base_url)).run()


if __name__ == "__main__":
    main()
