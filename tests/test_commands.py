"""Tests for the bosh commands, with the SDK replaced by mocks."""

import json
from datetime import date
from unittest.mock import Mock

import pytest

from bos_cli import cli
from bos_cli.core.client import SessionError, ValidationError
from bos_cli.core.types import (
    ApplicationKey,
    ApplicationMetadata,
    ApplicationSettings,
    ChallengeAnswer,
    DeletedUser,
    DeveloperProfile,
    DevUserInfo,
    Job,
    JobStatus,
    Problem,
    RecurringTransfer,
    ResetUserOutcome,
    ResetUsersResponse,
    UserListPage,
    UsersStats,
)
from bos_cli.shell import Prompter, Session


class ScriptedInput:
    def __init__(self, *answers: str):
        self.answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str = "") -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


def make_session(*answers: str, dev: bool = False, app: bool = False, user: bool = False) -> Session:
    ask = ScriptedInput(*answers)
    session = Session(client=Mock(), prompter=Prompter(input_func=ask, password_func=ask))
    if dev:
        session.set_dev("dev@example.com", Mock())
    if app:
        session.application_id = "app-1"
        session.app = Mock()
    if user:
        session.set_user("alice", Mock())
    return session


class TestDeveloperCommands:
    def test_login_prompts_for_missing_values(self):
        session = make_session("secret")
        dev = Mock()
        session.client.login.return_value = dev

        cli.cmd_login(session, ["dev@example.com"])

        session.client.login.assert_called_once_with("dev@example.com", "secret")
        assert session.dev is dev
        assert session.prompt == "dev@example.com> "

    def test_createdev_starts_session(self):
        session = make_session()

        cli.cmd_createdev(session, ["dev@example.com", "secret"])

        session.client.create_developer.assert_called_once_with("dev@example.com", "secret")
        assert session.dev_email == "dev@example.com"

    def test_logout_clears_session(self):
        session = make_session(dev=True)
        dev = session.dev

        cli.cmd_logout(session, [])

        dev.logout.assert_called_once_with()
        assert session.dev is None

    def test_commands_need_developer_session(self):
        with pytest.raises(SessionError, match="login to a developer account first"):
            cli.cmd_listapps(make_session(), [])

    def test_resetpassword(self):
        session = make_session()

        cli.cmd_resetpassword(session, ["new-secret", "mail-token"])

        session.client.reset_password.assert_called_once_with("new-secret", "mail-token")

    def test_profile(self, capsys):
        session = make_session(dev=True)
        session.dev.profile.return_value = DeveloperProfile(company="ACME", has_production_access=True)

        cli.cmd_profile(session, [])

        assert capsys.readouterr().out == "Company: ACME\nHas production access: true\n"

    def test_setprofile_asks_until_yes_or_no(self):
        session = make_session("sometimes", "n", dev=True)

        cli.cmd_setprofile(session, ["ACME"])

        session.dev.set_profile.assert_called_once_with(DeveloperProfile(company="ACME", has_production_access=False))

    def test_stats_with_dates(self, capsys):
        session = make_session(dev=True)
        session.dev.stats.users.return_value = UsersStats(users_total=4)

        cli.cmd_stats(session, ["Users", "2026-01-01", "2026-01-31"])

        session.dev.stats.users.assert_called_once_with(date(2026, 1, 1), date(2026, 1, 31))
        assert json.loads(capsys.readouterr().out)["users_total"] == 4

    def test_stats_unknown_type(self):
        with pytest.raises(ValidationError, match="unknown stat type: bananas"):
            cli.cmd_stats(make_session(dev=True), ["bananas"])

    def test_stats_bad_date(self):
        with pytest.raises(ValidationError, match="yyyy-mm-dd"):
            cli.cmd_stats(make_session(dev=True), ["users", "yesterday", "today"])


class TestApplicationCommands:
    def test_createapp(self, capsys):
        session = make_session("demo", dev=True)
        session.dev.applications.create.return_value = ApplicationMetadata(application_id="app-9", label="demo")

        cli.cmd_createapp(session, [])

        session.dev.applications.create.assert_called_once_with("demo")
        assert capsys.readouterr().out == "application id app-9\n"

    def test_listapps(self, capsys):
        session = make_session(dev=True)
        session.dev.applications.list.return_value = [
            ApplicationMetadata(application_id="a1", label="one"),
            ApplicationMetadata(application_id="a2", label="two"),
        ]

        cli.cmd_listapps(session, [])

        assert capsys.readouterr().out == "one (a1)\ntwo (a2)\n"

    def test_useapp_drops_user_session(self):
        session = make_session(dev=True, user=True)

        cli.cmd_useapp(session, ["app-2"])

        assert session.user is None
        assert session.prompt == "app-2> "
        session.client.with_application_id.assert_called_once_with("app-2")

    def test_createkey(self, capsys):
        session = make_session(dev=True)
        session.dev.applications.create_key.return_value = ApplicationKey(key="k-1")

        cli.cmd_createkey(session, ["app-1"])

        assert capsys.readouterr().out == "key k-1\n"

    def test_listusers(self, capsys):
        session = make_session(dev=True)
        session.dev.applications.list_users.return_value = UserListPage(users=["alice", "bob"])

        cli.cmd_listusers(session, ["app-1"])

        assert capsys.readouterr().out == "* alice\n* bob\n"

    def test_resetuser(self, capsys):
        session = make_session(dev=True)
        session.dev.applications.reset_users.return_value = ResetUsersResponse(
            users=[ResetUserOutcome(username="alice")]
        )

        cli.cmd_resetuser(session, ["app-1", "alice"])

        session.dev.applications.reset_users.assert_called_once_with("app-1", ["alice"])
        assert capsys.readouterr().out == "Reset user alice\n"

    @pytest.mark.parametrize(
        "users",
        [[], [ResetUserOutcome(username="bob")], [ResetUserOutcome("alice"), ResetUserOutcome("alice")]],
    )
    def test_resetuser_user_missing_from_response(self, users):
        session = make_session(dev=True)
        session.dev.applications.reset_users.return_value = ResetUsersResponse(users=users)

        with pytest.raises(ValidationError, match="could not find user in response"):
            cli.cmd_resetuser(session, ["app-1", "alice"])

    def test_resetuser_problems(self):
        session = make_session(dev=True)
        session.dev.applications.reset_users.return_value = ResetUsersResponse(
            users=[ResetUserOutcome(username="alice", problems=[Problem(code="locked"), Problem(code="busy")])]
        )

        with pytest.raises(ValidationError, match="reset failed: locked; busy"):
            cli.cmd_resetuser(session, ["app-1", "alice"])

    def test_userinfo(self, capsys):
        session = make_session(dev=True)
        session.dev.applications.user_info.return_value = DevUserInfo(username="alice")

        cli.cmd_userinfo(session, ["app-1", "u-1"])

        assert capsys.readouterr().out == "Username: alice\n"

    def test_updateappsettings(self, capsys):
        session = make_session(dev=True)
        session.dev.applications.update_settings.return_value = ApplicationSettings(background_refresh=True)

        cli.cmd_updateappsettings(session, ["app-1", "yes"])

        session.dev.applications.update_settings.assert_called_once_with("app-1", background_refresh=True)
        assert capsys.readouterr().out == "Background refresh enabled: true\n"

    def test_createwebhook(self, capsys):
        session = make_session(dev=True)
        session.dev.webhooks.create.return_value = "wh-1"

        cli.cmd_createwebhook(session, ["https://example.com/hook", "access.refresh.done", "transfer.done"])

        session.dev.webhooks.create.assert_called_once_with(
            1, "https://example.com/hook", ["access.refresh.done", "transfer.done"]
        )
        assert capsys.readouterr().out == "webhook id wh-1\n"

    def test_createwebhook_needs_events(self):
        session = make_session("", dev=True)

        with pytest.raises(ValidationError, match="at least one event"):
            cli.cmd_createwebhook(session, ["https://example.com/hook"])


class TestUserCommands:
    def test_loginuser_needs_application(self):
        with pytest.raises(SessionError, match="use an application id first"):
            cli.cmd_loginuser(make_session(), ["alice", "secret"])

    def test_loginuser(self):
        session = make_session(app=True)
        user = Mock()
        session.app.users.login.return_value = user

        cli.cmd_loginuser(session, ["alice", "secret"])

        assert session.user is user
        assert session.prompt == "app-1/alice> "

    def test_logoutuser_without_session(self):
        with pytest.raises(SessionError, match="not logged in as a user"):
            cli.cmd_logoutuser(make_session(app=True), [])

    def test_deleteuser(self, capsys):
        session = make_session("secret", app=True, user=True)
        session.user.delete.return_value = DeletedUser(deleted_user_id="u-1")

        cli.cmd_deleteuser(session, [])

        assert capsys.readouterr().out == "Deleted user id u-1\n"
        assert session.user is None

    def test_addaccess_collects_answers(self, capsys):
        session = make_session("login", "alice", "n", "q", app=True, user=True)
        session.user.accesses.add.return_value = Job(uri="/jobs/j1")

        cli.cmd_addaccess(session, ["DE-1"])

        session.user.accesses.add.assert_called_once_with("DE-1", [ChallengeAnswer("login", "alice", store=False)])
        assert capsys.readouterr().out == "Job URI: /jobs/j1\n"

    def test_deleteaccess(self, capsys):
        session = make_session(app=True, user=True)
        session.user.accesses.delete.return_value = "7"

        cli.cmd_deleteaccess(session, ["7"])

        session.user.accesses.delete.assert_called_once_with(7)
        assert capsys.readouterr().out == "Deleted ID: 7\n"

    def test_access_id_must_be_integer(self):
        with pytest.raises(ValidationError, match="access id must be an integer"):
            cli.cmd_getaccess(make_session(app=True, user=True), ["seven"])

    def test_refreshall(self, capsys):
        session = make_session(app=True, user=True)
        session.user.accesses.refresh_all.return_value = [Job("/jobs/a"), Job("/jobs/b")]

        cli.cmd_refreshall(session, [])

        assert capsys.readouterr().out == "Job URIs:\n *  /jobs/a\n *  /jobs/b\n"

    def test_waitjob_options(self, capsys):
        session = make_session(app=True, user=True)
        session.user.jobs.wait.return_value = JobStatus(finished=True, stage="imported")

        cli.cmd_waitjob(session, ["/jobs/j1", "--timeout", "5", "--interval", "0.5"])

        session.user.jobs.wait.assert_called_once_with("/jobs/j1", poll_interval=0.5, timeout=5.0)
        assert json.loads(capsys.readouterr().out)["stage"] == "imported"

    def test_waitjob_rejects_bad_timeout(self):
        with pytest.raises(ValidationError):
            cli.cmd_waitjob(make_session(app=True, user=True), ["/jobs/j1", "--timeout", "soon"])

    def test_deleterecurringtransfer(self, capsys):
        session = make_session("q", app=True, user=True)
        session.user.repeated_transactions.delete.return_value = RecurringTransfer(id="rt-1", state="succeeded")

        cli.cmd_deleterecurringtransfer(session, ["3"])

        session.user.repeated_transactions.delete.assert_called_once_with(3, [])
        assert json.loads(capsys.readouterr().out)["state"] == "succeeded"


def test_every_command_has_help():
    names = [c.name for c in cli.COMMANDS]

    assert len(names) == len(set(names))
    assert all(c.help for c in cli.COMMANDS)


def test_format_value():
    assert cli.format_value(True) == "true"
    assert cli.format_value(False) == "false"
    assert cli.format_value(3) == "3"
