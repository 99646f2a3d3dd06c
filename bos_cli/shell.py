"""
Interactive shell state and command loop.

A Session tracks the developer, application and user sessions established
so far. Commands read missing arguments through a Prompter, so the same
command works with all arguments on the line or none at all. Commands run
from a prompt loop, from a script, or one at a time.
"""

import getpass
import shlex
import sys
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import IO

from bos_cli.core.client import CLIError, SessionError
from bos_cli.core.logging import get_logger
from bos_cli.core.types import ChallengeAnswer
from bos_cli.sdk import AppClient, BOSClient, DevClient, UserClient

log = get_logger(__name__)

TRUE_VALUES = frozenset({"y", "yes", "1", "t", "true"})
FALSE_VALUES = frozenset({"n", "no", "0", "f", "false"})
EXIT_COMMANDS = frozenset({"exit", "quit"})


def parse_bool(value: str) -> bool | None:
    """Parse a yes/no answer; returns None when the value is not recognised."""
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    return None


# =============================================================================
# Prompting
# =============================================================================


class LineReader:
    """Reads commands and prompted values from the same line source."""

    def __init__(self, lines: Iterable[str]):
        self._lines: Iterator[str] = iter(lines)

    def __call__(self, prompt: str = "") -> str:
        try:
            return next(self._lines).rstrip("\r\n")
        except StopIteration:
            raise EOFError from None

    def __iter__(self) -> "LineReader":
        return self

    def __next__(self) -> str:
        try:
            return self()
        except EOFError:
            raise StopIteration from None


class Prompter:
    """Reads command arguments, prompting for the ones that were not given."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        password_func: Callable[[str], str] = getpass.getpass,
    ):
        self.input_func = input_func
        self.password_func = password_func

    @classmethod
    def from_reader(cls, reader: LineReader) -> "Prompter":
        """Prompter that takes every answer, passwords included, from a script."""
        return cls(input_func=reader, password_func=reader)

    def ask(self, prompt: str) -> str:
        return self.input_func(f"{prompt}: ")

    def arg(self, args: list[str], index: int, prompt: str) -> str:
        """Return args[index], or ask for it."""
        if len(args) > index:
            return args[index]
        return self.ask(prompt)

    def password(self, args: list[str], index: int, prompt: str = "Password") -> str:
        """Return args[index], or ask for it without echo."""
        if len(args) > index:
            return args[index]
        return self.password_func(f"{prompt}: ")

    def boolean(self, args: list[str], index: int, prompt: str) -> bool:
        """Return args[index] as a bool, asking until a yes/no answer is given."""
        value = args[index] if len(args) > index else None
        while True:
            if value is not None:
                parsed = parse_bool(value)
                if parsed is not None:
                    return parsed
            value = self.ask(prompt)

    def challenge_answers(self) -> list[ChallengeAnswer]:
        """Collect challenge answers until the user enters q."""
        answers: list[ChallengeAnswer] = []
        while True:
            challenge_id = self.input_func("Challenge ID (q to quit): ")
            if challenge_id.strip().lower() == "q":
                return answers
            value = self.input_func("Value: ")
            store = self.boolean([], 0, "Store (y/n)")
            answers.append(ChallengeAnswer(id=challenge_id, value=value, store=store))


# =============================================================================
# Session
# =============================================================================


@dataclass
class Session:
    """The sessions established in the shell so far."""

    client: BOSClient
    prompter: Prompter = field(default_factory=Prompter)

    dev_email: str = ""
    dev: DevClient | None = None

    application_id: str = ""
    app: AppClient | None = None

    user_name: str = ""
    user: UserClient | None = None

    @property
    def prompt(self) -> str:
        if self.application_id and self.user_name:
            return f"{self.application_id}/{self.user_name}> "
        if self.application_id:
            return f"{self.application_id}> "
        if self.dev_email:
            return f"{self.dev_email}> "
        return "> "

    def require_dev(self) -> DevClient:
        if self.dev is None:
            raise SessionError("login to a developer account first")
        return self.dev

    def require_app(self) -> AppClient:
        if self.app is None:
            raise SessionError("use an application id first")
        return self.app

    def require_user(self, message: str = "login as a user first") -> UserClient:
        if self.user is None:
            raise SessionError(message)
        return self.user

    def set_dev(self, email: str, dev: DevClient) -> None:
        self.dev_email = email
        self.dev = dev

    def clear_dev(self) -> None:
        self.dev_email = ""
        self.dev = None

    def use_app(self, application_id: str) -> None:
        self.application_id = application_id
        self.app = self.client.with_application_id(application_id)

    def set_user(self, name: str, user: UserClient) -> None:
        self.user_name = name
        self.user = user

    def clear_user(self) -> None:
        self.user_name = ""
        self.user = None


# =============================================================================
# Command Loop
# =============================================================================


CommandFunc = Callable[[Session, list[str]], None]


@dataclass
class Command:
    name: str
    help: str
    func: CommandFunc


class UnknownCommandError(CLIError):
    """Raised for a command name that is not registered."""


class Shell:
    """Dispatches command lines to registered commands."""

    def __init__(
        self,
        session: Session,
        commands: Iterable[Command],
        out: IO[str] | None = None,
        err: IO[str] | None = None,
    ):
        self.session = session
        self.commands = {c.name: c for c in commands}
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def report(self, error: CLIError) -> None:
        print(f"Error: {error.message}", file=self.err)

    def help_text(self) -> str:
        lines = ["Commands:"]
        for name in sorted(self.commands):
            lines.append(f"  {name:<26}{self.commands[name].help}")
        lines.append(f"  {'exit, quit':<26}leave the shell")
        return "\n".join(lines)

    def execute(self, argv: list[str]) -> bool:
        """
        Run one command.

        Args:
            argv: Command name followed by its arguments

        Returns:
            True if the command succeeded, False if it reported an error

        Raises:
            UnknownCommandError: If the command name is not registered

        """
        name, args = argv[0], argv[1:]
        if name == "help":
            print(self.help_text(), file=self.out)
            return True
        command = self.commands.get(name)
        if command is None:
            raise UnknownCommandError(f"unknown command: {name}")

        log.debug("command_started", command=name)
        try:
            command.func(self.session, args)
        except CLIError as e:
            self.report(e)
            return False
        except EOFError:
            self.report(CLIError(f"{name}: input ended before all values were read"))
            return False
        return True

    def run_script(self, reader: LineReader) -> int:
        """
        Run commands read line by line.

        Blank lines and lines starting with # are skipped. Command errors are
        reported and the script carries on; an unknown command or a line that
        cannot be split stops the script.

        Returns:
            Process exit status

        """
        self.session.prompter = Prompter.from_reader(reader)
        for line in reader:
            text = line.strip()
            if not text or text.startswith("#"):
                continue
            try:
                argv = shlex.split(text)
            except ValueError as e:
                print(f"Error: cannot parse line {text!r}: {e}", file=self.err)
                return 1
            if argv[0] in EXIT_COMMANDS:
                return 0
            try:
                self.execute(argv)
            except UnknownCommandError as e:
                self.report(e)
                return 1
        return 0

    def run_interactive(self, input_func: Callable[[str], str] = input) -> int:
        """Read and run commands from a prompt until exit or end of input."""
        print("Bankrs OS shell. Type 'help' for a list of commands.", file=self.out)
        while True:
            try:
                text = input_func(self.session.prompt).strip()
            except EOFError:
                print(file=self.out)
                return 0
            except KeyboardInterrupt:
                print(file=self.out)
                continue

            if not text:
                continue
            try:
                argv = shlex.split(text)
            except ValueError as e:
                print(f"Error: {e}", file=self.err)
                continue
            if argv[0] in EXIT_COMMANDS:
                return 0
            try:
                self.execute(argv)
            except UnknownCommandError as e:
                self.report(e)
            except KeyboardInterrupt:
                print(file=self.out)

    def run_once(self, argv: list[str]) -> int:
        """Run a single command given on the command line."""
        try:
            return 0 if self.execute(argv) else 1
        except UnknownCommandError as e:
            self.report(e)
            return 1
