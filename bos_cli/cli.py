"""
bosh - interactive shell for the Bankrs OS API.

This layer provides the user-facing shell commands, using the SDK layer
for all operations. It handles:
- Argument parsing for the shell itself
- Prompting for arguments left off a command
- JSON output for structured results, plain lines for confirmations
"""

import argparse
import json
import os
import sys
from datetime import date, datetime
from typing import Any

from dotenv import load_dotenv

from bos_cli import __version__
from bos_cli.core.client import APIClient, CLIError, RetryPolicy, ValidationError
from bos_cli.core.logging import DEFAULT_LEVEL, configure_logging
from bos_cli.core.types import DeveloperProfile, to_json
from bos_cli.sdk import BOSClient
from bos_cli.shell import Command, LineReader, Session, Shell

# =============================================================================
# Output Helpers
# =============================================================================


def json_output(data: Any) -> None:
    """Print a result as indented JSON."""
    print(json.dumps(to_json(data), indent=2, default=str))


def format_value(value: Any) -> str:
    """Format a scalar for plain line output."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def int_arg(value: str, name: str) -> int:
    """Parse an integer id given on the command line."""
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {value!r}") from None


def date_arg(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"expected a date in yyyy-mm-dd format: {value!r}") from None


# =============================================================================
# Developer Commands
# =============================================================================


def cmd_createdev(session: Session, args: list[str]) -> None:
    """Create a developer account and log into it."""
    email = session.prompter.arg(args, 0, "Email")
    password = session.prompter.password(args, 1)
    session.set_dev(email, session.client.create_developer(email, password))


def cmd_login(session: Session, args: list[str]) -> None:
    email = session.prompter.arg(args, 0, "Email")
    password = session.prompter.password(args, 1)
    session.set_dev(email, session.client.login(email, password))


def cmd_changepassword(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    old_password = session.prompter.password(args, 0, "Old password")
    new_password = session.prompter.password(args, 1, "New password")
    dev.change_password(old_password, new_password)


def cmd_logout(session: Session, args: list[str]) -> None:
    session.require_dev().logout()
    session.clear_dev()


def cmd_deletedeveloper(session: Session, args: list[str]) -> None:
    session.require_dev().delete()
    session.clear_dev()


def cmd_lostpassword(session: Session, args: list[str]) -> None:
    session.client.lost_password(session.prompter.arg(args, 0, "Email"))


def cmd_resetpassword(session: Session, args: list[str]) -> None:
    password = session.prompter.password(args, 0)
    token = session.prompter.arg(args, 1, "Token")
    session.client.reset_password(password, token)


def cmd_profile(session: Session, args: list[str]) -> None:
    profile = session.require_dev().profile()
    print(f"Company: {profile.company}")
    print(f"Has production access: {format_value(profile.has_production_access)}")


def cmd_setprofile(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    profile = DeveloperProfile(
        company=session.prompter.arg(args, 0, "Company name"),
        has_production_access=session.prompter.boolean(args, 1, "Has production access (y/n)"),
    )
    dev.set_profile(profile)


def cmd_stats(session: Session, args: list[str]) -> None:
    """Show usage statistics of one kind, optionally for a date range."""
    dev = session.require_dev()
    kind = session.prompter.arg(args, 0, "Type").lower()
    from_date = to_date = None
    if len(args) > 2:
        from_date, to_date = date_arg(args[1]), date_arg(args[2])

    fetch = {
        "merchants": dev.stats.merchants,
        "providers": dev.stats.providers,
        "transfers": dev.stats.transfers,
        "users": dev.stats.users,
        "requests": dev.stats.requests,
    }.get(kind)
    if fetch is None:
        raise ValidationError(f"unknown stat type: {kind}", details={"valid": "merchants, providers, transfers, users, requests"})
    json_output(fetch(from_date, to_date))


# =============================================================================
# Application Management Commands
# =============================================================================


def cmd_createapp(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    app = dev.applications.create(session.prompter.arg(args, 0, "Label"))
    print(f"application id {app.application_id}")


def cmd_listapps(session: Session, args: list[str]) -> None:
    for app in session.require_dev().applications.list():
        print(f"{app.label} ({app.application_id})")


def cmd_updateapp(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    application_id = session.prompter.arg(args, 0, "Application ID")
    label = session.prompter.arg(args, 1, "Label")
    dev.applications.update(application_id, label)


def cmd_deleteapp(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    dev.applications.delete(session.prompter.arg(args, 0, "Application ID"))


def cmd_useapp(session: Session, args: list[str]) -> None:
    """Switch to an application session; any user session is dropped."""
    application_id = session.prompter.arg(args, 0, "Application ID")
    session.clear_user()
    session.use_app(application_id)


def cmd_listkeys(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    json_output(dev.applications.list_keys(session.prompter.arg(args, 0, "Application ID")))


def cmd_createkey(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    key = dev.applications.create_key(session.prompter.arg(args, 0, "Application ID"))
    print(f"key {key.key}")


def cmd_deletekey(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    dev.application_keys.delete(session.prompter.arg(args, 0, "Key"))


def cmd_listusers(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    application_id = session.prompter.arg(args, 0, "Application ID")
    for user in dev.applications.list_users(application_id).users:
        print(f"* {user}")


def cmd_resetuser(session: Session, args: list[str]) -> None:
    """Reset one user's banking data, failing unless the service confirms it."""
    dev = session.require_dev()
    application_id = session.prompter.arg(args, 0, "Application ID")
    username = session.prompter.arg(args, 1, "Username")
    response = dev.applications.reset_users(application_id, [username])

    if len(response.users) != 1 or response.users[0].username != username:
        raise ValidationError("reset failed: could not find user in response")
    problems = response.users[0].problems
    if problems:
        raise ValidationError(
            "reset failed: " + "; ".join(p.code for p in problems),
            details={"problems": to_json(problems)},
        )
    print(f"Reset user {username}")


def cmd_userinfo(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    application_id = session.prompter.arg(args, 0, "Application ID")
    user_id = session.prompter.arg(args, 1, "UUID")
    info = dev.applications.user_info(application_id, user_id)
    print(f"Username: {info.username}")


def cmd_appsettings(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    settings = dev.applications.settings(session.prompter.arg(args, 0, "Application ID"))
    print(f"Background refresh enabled: {format_value(settings.background_refresh)}")


def cmd_updateappsettings(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    application_id = session.prompter.arg(args, 0, "Application ID")
    background_refresh = session.prompter.boolean(args, 1, "Background refresh enabled (y/n)")
    settings = dev.applications.update_settings(application_id, background_refresh=background_refresh)
    print(f"Background refresh enabled: {format_value(settings.background_refresh)}")


# =============================================================================
# Webhook Commands
# =============================================================================


def cmd_listwebhooks(session: Session, args: list[str]) -> None:
    json_output(session.require_dev().webhooks.list())


def cmd_createwebhook(session: Session, args: list[str]) -> None:
    """Subscribe a URL to one or more events."""
    dev = session.require_dev()
    url = session.prompter.arg(args, 0, "URL")
    events = args[1:] or session.prompter.ask("Events (space separated)").split()
    if not events:
        raise ValidationError("at least one event is required")
    webhook_id = dev.webhooks.create(1, url, events)
    print(f"webhook id {webhook_id}")


def cmd_deletewebhook(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    dev.webhooks.delete(session.prompter.arg(args, 0, "Webhook ID"))


def cmd_testwebhook(session: Session, args: list[str]) -> None:
    dev = session.require_dev()
    webhook_id = session.prompter.arg(args, 0, "Webhook ID")
    event = session.prompter.arg(args, 1, "Event")
    json_output(dev.webhooks.test(webhook_id, event))


# =============================================================================
# Application Commands
# =============================================================================


def cmd_createuser(session: Session, args: list[str]) -> None:
    app = session.require_app()
    name = session.prompter.arg(args, 0, "Name")
    password = session.prompter.password(args, 1)
    session.set_user(name, app.users.create(name, password))


def cmd_loginuser(session: Session, args: list[str]) -> None:
    app = session.require_app()
    name = session.prompter.arg(args, 0, "Name")
    password = session.prompter.password(args, 1)
    session.set_user(name, app.users.login(name, password))


def cmd_categories(session: Session, args: list[str]) -> None:
    json_output(session.require_app().categories.list())


def cmd_searchproviders(session: Session, args: list[str]) -> None:
    app = session.require_app()
    json_output(app.providers.search(session.prompter.arg(args, 0, "Query")))


def cmd_provider(session: Session, args: list[str]) -> None:
    app = session.require_app()
    json_output(app.providers.get(session.prompter.arg(args, 0, "Provider ID")))


def cmd_validateiban(session: Session, args: list[str]) -> None:
    app = session.require_app()
    json_output(app.iban.validate(session.prompter.arg(args, 0, "IBAN")))


# =============================================================================
# User Commands
# =============================================================================


def cmd_logoutuser(session: Session, args: list[str]) -> None:
    session.require_user("not logged in as a user").logout()
    session.clear_user()


def cmd_deleteuser(session: Session, args: list[str]) -> None:
    user = session.require_user("not logged in as a user")
    deleted = user.delete(session.prompter.password(args, 0))
    print(f"Deleted user id {deleted.deleted_user_id}")
    session.clear_user()


def cmd_accesses(session: Session, args: list[str]) -> None:
    json_output(session.require_user().accesses.list())


def cmd_addaccess(session: Session, args: list[str]) -> None:
    """Start adding a bank access; prints the job to follow."""
    user = session.require_user()
    provider_id = session.prompter.arg(args, 0, "Provider ID")
    answers = session.prompter.challenge_answers()
    job = user.accesses.add(provider_id, answers)
    print(f"Job URI: {job.uri}")


def cmd_deleteaccess(session: Session, args: list[str]) -> None:
    user = session.require_user()
    access_id = int_arg(session.prompter.arg(args, 0, "Access ID"), "access id")
    print(f"Deleted ID: {user.accesses.delete(access_id)}")


def cmd_getaccess(session: Session, args: list[str]) -> None:
    user = session.require_user()
    access_id = int_arg(session.prompter.arg(args, 0, "Access ID"), "access id")
    json_output(user.accesses.get(access_id))


def cmd_updateaccess(session: Session, args: list[str]) -> None:
    user = session.require_user()
    access_id = int_arg(session.prompter.arg(args, 0, "Access ID"), "access id")
    answers = session.prompter.challenge_answers()
    json_output(user.accesses.update(access_id, answers))


def cmd_refreshaccess(session: Session, args: list[str]) -> None:
    user = session.require_user()
    access_id = int_arg(session.prompter.arg(args, 0, "Access ID"), "access id")
    print(f"Job URI: {user.accesses.refresh(access_id).uri}")


def cmd_refreshall(session: Session, args: list[str]) -> None:
    jobs = session.require_user().accesses.refresh_all()
    print("Job URIs:")
    for job in jobs:
        print(f" *  {job.uri}")


def cmd_job(session: Session, args: list[str]) -> None:
    user = session.require_user()
    json_output(user.jobs.get(session.prompter.arg(args, 0, "Job URI")))


def cmd_answer(session: Session, args: list[str]) -> None:
    user = session.require_user()
    uri = session.prompter.arg(args, 0, "Job URI")
    user.jobs.answer(uri, session.prompter.challenge_answers())


def cmd_canceljob(session: Session, args: list[str]) -> None:
    user = session.require_user()
    user.jobs.cancel(session.prompter.arg(args, 0, "Job URI"))


def cmd_waitjob(session: Session, args: list[str]) -> None:
    """Poll a job until it finishes or asks for a challenge."""
    user = session.require_user()
    parser = argparse.ArgumentParser(prog="waitjob", add_help=False, exit_on_error=False)
    parser.add_argument("uri", nargs="?")
    parser.add_argument("--timeout", type=float, default=120.0)
    parser.add_argument("--interval", type=float, default=1.0)
    try:
        opts, extra = parser.parse_known_args(args)
    except argparse.ArgumentError as e:
        raise ValidationError(str(e)) from None
    if extra:
        raise ValidationError(f"unexpected arguments: {' '.join(extra)}")
    uri = opts.uri or session.prompter.ask("Job URI")
    json_output(user.jobs.wait(uri, poll_interval=opts.interval, timeout=opts.timeout))


def cmd_accounts(session: Session, args: list[str]) -> None:
    json_output(session.require_user().accounts.list())


def cmd_getaccount(session: Session, args: list[str]) -> None:
    user = session.require_user()
    account_id = int_arg(session.prompter.arg(args, 0, "Account ID"), "account id")
    json_output(user.accounts.get(account_id))


def cmd_transactions(session: Session, args: list[str]) -> None:
    json_output(session.require_user().transactions.list().data)


def cmd_gettransaction(session: Session, args: list[str]) -> None:
    user = session.require_user()
    transaction_id = int_arg(session.prompter.arg(args, 0, "Transaction ID"), "transaction id")
    json_output(user.transactions.get(transaction_id))


def cmd_scheduledtransactions(session: Session, args: list[str]) -> None:
    json_output(session.require_user().scheduled_transactions.list().data)


def cmd_getscheduledtransaction(session: Session, args: list[str]) -> None:
    user = session.require_user()
    transaction_id = int_arg(session.prompter.arg(args, 0, "Transaction ID"), "transaction id")
    json_output(user.scheduled_transactions.get(transaction_id))


def cmd_repeatedtransactions(session: Session, args: list[str]) -> None:
    json_output(session.require_user().repeated_transactions.list().data)


def cmd_getrepeatedtransaction(session: Session, args: list[str]) -> None:
    user = session.require_user()
    transaction_id = int_arg(session.prompter.arg(args, 0, "Transaction ID"), "transaction id")
    json_output(user.repeated_transactions.get(transaction_id))


def cmd_deleterecurringtransfer(session: Session, args: list[str]) -> None:
    user = session.require_user()
    transaction_id = int_arg(session.prompter.arg(args, 0, "ID"), "id")
    answers = session.prompter.challenge_answers()
    json_output(user.repeated_transactions.delete(transaction_id, answers))


# =============================================================================
# Command Table
# =============================================================================


COMMANDS = [
    Command("createdev", "create a new developer account", cmd_createdev),
    Command("login", "login with an existing developer account", cmd_login),
    Command("changepassword", "change password for the current developer account", cmd_changepassword),
    Command("logout", "logout from a developer account", cmd_logout),
    Command("deletedeveloper", "delete a developer account", cmd_deletedeveloper),
    Command("lostpassword", "send a lost password request", cmd_lostpassword),
    Command("resetpassword", "reset a lost password", cmd_resetpassword),
    Command("profile", "show the developer's profile", cmd_profile),
    Command("setprofile", "set the developer's profile", cmd_setprofile),
    Command("createapp", "create an application", cmd_createapp),
    Command("listapps", "list registered applications", cmd_listapps),
    Command("updateapp", "update an application", cmd_updateapp),
    Command("deleteapp", "delete an application", cmd_deleteapp),
    Command("useapp", "switch to using an application", cmd_useapp),
    Command("stats", "display stats for a developer", cmd_stats),
    Command("listkeys", "list the keys of an application", cmd_listkeys),
    Command("createkey", "create a key for an application", cmd_createkey),
    Command("deletekey", "delete an application key", cmd_deletekey),
    Command("listwebhooks", "list webhooks", cmd_listwebhooks),
    Command("createwebhook", "subscribe a URL to events", cmd_createwebhook),
    Command("deletewebhook", "delete a webhook", cmd_deletewebhook),
    Command("testwebhook", "send a test event to a webhook", cmd_testwebhook),
    Command("listusers", "list users", cmd_listusers),
    Command("resetuser", "reset one user's banking data", cmd_resetuser),
    Command("userinfo", "lookup information about a user", cmd_userinfo),
    Command("appsettings", "show application settings", cmd_appsettings),
    Command("updateappsettings", "update application settings", cmd_updateappsettings),
    Command("createuser", "create a new user", cmd_createuser),
    Command("loginuser", "login as a user", cmd_loginuser),
    Command("logoutuser", "logout from a user session", cmd_logoutuser),
    Command("deleteuser", "delete the current user", cmd_deleteuser),
    Command("categories", "list classification categories", cmd_categories),
    Command("searchproviders", "search financial providers", cmd_searchproviders),
    Command("provider", "lookup a single financial provider", cmd_provider),
    Command("validateiban", "validate an IBAN", cmd_validateiban),
    Command("accesses", "list bank accesses for a user", cmd_accesses),
    Command("addaccess", "add a bank access for a user", cmd_addaccess),
    Command("deleteaccess", "delete a bank access", cmd_deleteaccess),
    Command("getaccess", "get details of a bank access", cmd_getaccess),
    Command("updateaccess", "update challenge answers for a bank access", cmd_updateaccess),
    Command("refreshaccess", "refresh a bank access", cmd_refreshaccess),
    Command("refreshall", "refresh all bank accesses", cmd_refreshall),
    Command("job", "show the status of a job", cmd_job),
    Command("answer", "provide a challenge answer for a job", cmd_answer),
    Command("canceljob", "cancel a job", cmd_canceljob),
    Command("waitjob", "wait for a job to finish or ask for a challenge", cmd_waitjob),
    Command("accounts", "list bank accounts for a user", cmd_accounts),
    Command("getaccount", "get details of a single account", cmd_getaccount),
    Command("transactions", "list transactions for a user", cmd_transactions),
    Command("gettransaction", "get details of a single transaction", cmd_gettransaction),
    Command("scheduledtransactions", "list scheduled transactions for a user", cmd_scheduledtransactions),
    Command("getscheduledtransaction", "get details of a single scheduled transaction", cmd_getscheduledtransaction),
    Command("repeatedtransactions", "list repeated transactions for a user", cmd_repeatedtransactions),
    Command("getrepeatedtransaction", "get details of a single repeated transaction", cmd_getrepeatedtransaction),
    Command("deleterecurringtransfer", "delete a recurring transfer", cmd_deleterecurringtransfer),
]


# =============================================================================
# Main CLI
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="bosh",
        description="bosh - interactive shell for the Bankrs OS API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  bosh                     interactive prompt
  bosh -i commands.txt     run commands from a file
  bosh < commands.txt      run commands piped on stdin
  bosh <command> [args]    run a single command

Examples:
  bosh -a localhost:8443 --insecure
  bosh lostpassword dev@example.com
  echo "login dev@example.com secret" | bosh
""",
    )
    parser.add_argument("-a", "--addr", help="address of api to connect to (overrides BOS_ADDR)")
    parser.add_argument("-i", "--input", help="filename of document to read commands from")
    parser.add_argument(
        "--insecure",
        action="store_true",
        default=None,
        help="disable TLS verification, e.g. for development systems with self signed certificates",
    )
    parser.add_argument("--timeout", type=float, help="request timeout in seconds (overrides BOS_TIMEOUT)")
    parser.add_argument("--retries", type=int, help="retries for idempotent requests (overrides BOS_RETRIES)")
    parser.add_argument("--log-level", help="log level (overrides BOS_LOG_LEVEL)")
    parser.add_argument("--log-json", action="store_true", help="render logs as JSON")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="command to run instead of starting the shell")
    return parser


def create_client(args: argparse.Namespace) -> BOSClient:
    retry_policy = RetryPolicy(max_retries=args.retries) if args.retries is not None else None
    api = APIClient(
        addr=args.addr,
        user_agent="bosh",
        timeout=args.timeout,
        insecure=args.insecure,
        retry_policy=retry_policy,
    )
    return BOSClient(client=api)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    load_dotenv()
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level or os.environ.get("BOS_LOG_LEVEL") or DEFAULT_LEVEL, json_logs=args.log_json)

    session = Session(client=create_client(args))
    shell = Shell(session, COMMANDS)

    if args.command:
        sys.exit(shell.run_once(args.command))

    if args.input:
        try:
            f = open(args.input, encoding="utf-8")
        except OSError as e:
            shell.report(CLIError(f"cannot read {args.input}: {e.strerror}"))
            sys.exit(1)
        with f:
            sys.exit(shell.run_script(LineReader(f)))

    if not sys.stdin.isatty():
        sys.exit(shell.run_script(LineReader(sys.stdin)))

    sys.exit(shell.run_interactive())


if __name__ == "__main__":
    main()
