"""Tests for CLI commands."""

from moneytracker.cli.main import cli

from conftest import FakeMailbox, FakeMailboxOpener


def invoke(cli_runner, temp_db, args, **kwargs):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], **kwargs)


def test_user_create_and_list(cli_runner, temp_db):
    result = invoke(
        cli_runner, temp_db, ["user", "create", "alice", "--email", "alice@example.com"]
    )
    assert result.exit_code == 0
    assert "Created user 'alice'" in result.output

    result = invoke(cli_runner, temp_db, ["user", "list"])
    assert result.exit_code == 0
    assert "alice" in result.output
    assert "Mail scan: off" in result.output


def test_user_create_duplicate(cli_runner, temp_db, sample_user):
    result = invoke(cli_runner, temp_db, ["user", "create", "alice"])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "already exists" in result.output


def test_unknown_user(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, ["mail", "status", "nobody"])

    assert result.exit_code == 1
    assert "User 'nobody' not found" in result.output


def test_user_by_id(cli_runner, temp_db, sample_user):
    result = invoke(cli_runner, temp_db, ["mail", "status", str(sample_user.id)])

    assert result.exit_code == 0
    assert "Enabled:    no" in result.output


def test_category_create_and_list(cli_runner, temp_db, sample_user):
    result = invoke(
        cli_runner, temp_db, ["category", "create", "Travel", "--user", "alice", "--color", "#ff0000"]
    )
    assert result.exit_code == 0
    assert "Created category 'Travel'" in result.output

    result = invoke(cli_runner, temp_db, ["category", "list", "--user", "alice"])
    assert result.exit_code == 0
    assert "Travel" in result.output
    assert "#ff0000" in result.output


def test_category_delete(cli_runner, temp_db, sample_category):
    result = invoke(
        cli_runner, temp_db, ["category", "delete", "Groceries", "--user", "alice", "--yes"]
    )

    assert result.exit_code == 0
    assert "Deleted category 'Groceries'" in result.output


def test_mail_set_never_prints_password(cli_runner, temp_db, sample_user):
    result = invoke(
        cli_runner,
        temp_db,
        [
            "mail",
            "set",
            "alice",
            "--host",
            "imap.example.com",
            "--username",
            "alice@example.com",
            "--password",
            "s3cret-app-pass",
            "--enable",
        ],
    )
    assert result.exit_code == 0
    assert "s3cret-app-pass" not in result.output

    result = invoke(cli_runner, temp_db, ["mail", "config", "alice"])
    assert result.exit_code == 0
    assert "Host:     imap.example.com" in result.output
    assert "Password: set" in result.output
    assert "s3cret-app-pass" not in result.output

    result = invoke(cli_runner, temp_db, ["mail", "status", "alice"])
    assert "Configured: yes" in result.output


def test_mail_set_invalid_port(cli_runner, temp_db, sample_user):
    result = invoke(cli_runner, temp_db, ["mail", "set", "alice", "--port", "70000"])

    assert result.exit_code == 1
    assert "Invalid IMAP port" in result.output


def test_mail_disable(cli_runner, temp_db, mail_user):
    result = invoke(cli_runner, temp_db, ["mail", "disable", "alice"])
    assert result.exit_code == 0

    result = invoke(cli_runner, temp_db, ["mail", "status", "alice"])
    assert "Enabled:    no" in result.output


def test_scan(cli_runner, temp_db, mail_user, make_message):
    mailbox = FakeMailbox([make_message()])
    result = invoke(
        cli_runner,
        temp_db,
        ["scan", "alice"],
        obj={"mailbox_opener": FakeMailboxOpener(mailbox), "notification_channels": []},
    )

    assert result.exit_code == 0
    assert "Email parsing started" in result.output
    assert "alice: scan complete" in result.output
    assert "1 transactions" in result.output
    assert mailbox.read == ["<order-1@amazon.in>"]
    assert len(temp_db.list_transactions(mail_user.id)) == 1


def test_scan_not_configured(cli_runner, temp_db, sample_user):
    opener = FakeMailboxOpener()
    result = invoke(
        cli_runner, temp_db, ["scan", "alice"], obj={"mailbox_opener": opener}
    )

    assert result.exit_code == 1
    assert "Email parsing is not enabled" in result.output
    assert opener.accounts == []


def test_scan_all_without_users(cli_runner, temp_db, sample_user):
    result = invoke(cli_runner, temp_db, ["scan-all"], obj={"mailbox_opener": FakeMailboxOpener()})

    assert result.exit_code == 0
    assert "No users have mail scanning enabled." in result.output


def test_scan_all(cli_runner, temp_db, mail_user, make_message):
    result = invoke(
        cli_runner,
        temp_db,
        ["scan-all"],
        obj={
            "mailbox_opener": FakeMailboxOpener(FakeMailbox([make_message()])),
            "notification_channels": [],
        },
    )

    assert result.exit_code == 0
    assert "alice: scan complete" in result.output


def test_import(cli_runner, temp_db, sample_user, fixtures_dir):
    result = invoke(
        cli_runner,
        temp_db,
        ["import", str(fixtures_dir / "sample_transactions.csv"), "--user", "alice"],
        obj={"notification_channels": []},
    )

    assert result.exit_code == 0
    assert "Imported: 3 transactions" in result.output
    assert len(temp_db.list_transactions(sample_user.id)) == 3


def test_import_missing_columns(cli_runner, temp_db, sample_user, fixtures_dir):
    result = invoke(
        cli_runner,
        temp_db,
        ["import", str(fixtures_dir / "sample_transactions_missing_cols.csv"), "--user", "alice"],
        obj={"notification_channels": []},
    )

    assert result.exit_code == 1
    assert "missing required columns" in result.output


def test_csv_template(cli_runner, temp_db, tmp_path):
    result = invoke(cli_runner, temp_db, ["csv-template"])
    assert result.exit_code == 0
    assert result.output.startswith("Date,Description,Amount,Category,PaymentMethod,Notes")

    target = tmp_path / "template.csv"
    result = invoke(cli_runner, temp_db, ["csv-template", "--output", str(target)])
    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8").startswith("Date,Description")


def test_notifications_list_and_read(cli_runner, temp_db, notification_service, sample_user):
    from moneytracker.domain.entities import NotificationType

    notification_service.create_notification(
        sample_user.id, NotificationType.SYSTEM, "CSV Import Complete", "done"
    )

    result = invoke(
        cli_runner, temp_db, ["notifications", "list", "alice"], obj={"notification_channels": []}
    )
    assert result.exit_code == 0
    assert "1 unread" in result.output
    assert "CSV Import Complete: done" in result.output

    result = invoke(
        cli_runner,
        temp_db,
        ["notifications", "read", "alice", "--all"],
        obj={"notification_channels": []},
    )
    assert result.exit_code == 0
    assert "Marked 1 notification read" in result.output

    result = invoke(
        cli_runner,
        temp_db,
        ["notifications", "list", "alice", "--unread"],
        obj={"notification_channels": []},
    )
    assert "No notifications." in result.output
