"""
Tests for the archive command.
"""

import argparse

import pytest

from slack_archiver import cli
from slack_archiver.cli import add_archive_arguments, archive
from slack_archiver.config import Settings
from slack_archiver.services.retrieval import ERROR_PREFIX

from fakes import (
    CHANNEL_ID,
    PERMALINK,
    ROOT_TS,
    FakeTransport,
    error_response,
    raw_message,
    replies_response,
    user_response,
)


def parse(*argv):
    parser = argparse.ArgumentParser()
    add_archive_arguments(parser)
    return parser.parse_args(list(argv))


@pytest.mark.asyncio
async def test_archive_writes_file(tmp_path, capsys):
    transport = FakeTransport(
        {
            ("conversations.replies", ROOT_TS): replies_response([raw_message(ROOT_TS, user="U1")]),
            ("users.info", "U1"): user_response("U1"),
        }
    )
    args = parse(
        PERMALINK, "--token", "xoxc-cli", "--cookie", "xoxd-cli", "--users", "--output", str(tmp_path)
    )

    exit_code = await archive(args, transport=transport)

    assert exit_code == 0
    assert (tmp_path / f"{CHANNEL_ID}-{ROOT_TS}.json").exists()
    assert transport.calls_to("users.info") == ["U1"]
    assert "Archived 1 messages" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_archive_prints_error(tmp_path, capsys):
    transport = FakeTransport({("conversations.replies", ROOT_TS): error_response("channel_not_found")})
    args = parse(PERMALINK, "--token", "xoxc-cli", "--cookie", "xoxd-cli", "--output", str(tmp_path))

    exit_code = await archive(args, transport=transport)

    assert exit_code == 1
    out = capsys.readouterr().out
    assert out.startswith(ERROR_PREFIX)
    assert "channel_not_found" in out
    assert list(tmp_path.iterdir()) == []


def thread_transport():
    return FakeTransport(
        {("conversations.replies", ROOT_TS): replies_response([raw_message(ROOT_TS, user="U1")])}
    )


@pytest.mark.asyncio
async def test_existing_archive_is_not_fetched_again(tmp_path, capsys):
    existing = tmp_path / f"{CHANNEL_ID}-{ROOT_TS}.json"
    existing.write_text("{}", encoding="utf-8")
    transport = thread_transport()
    args = parse(PERMALINK, "--token", "xoxc-cli", "--cookie", "xoxd-cli", "--output", str(tmp_path))

    exit_code = await archive(args, transport=transport)

    assert exit_code == 0
    assert transport.requests == []
    assert existing.read_text(encoding="utf-8") == "{}"
    assert "Already archived" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_force_fetches_existing_archive(tmp_path):
    existing = tmp_path / f"{CHANNEL_ID}-{ROOT_TS}.json"
    existing.write_text("{}", encoding="utf-8")
    transport = thread_transport()
    args = parse(
        PERMALINK, "--token", "xoxc-cli", "--cookie", "xoxd-cli", "--output", str(tmp_path), "--force"
    )

    exit_code = await archive(args, transport=transport)

    assert exit_code == 0
    assert len(transport.requests) == 1
    assert existing.read_text(encoding="utf-8") != "{}"


def test_flags_can_turn_off_settings_defaults(monkeypatch):
    settings = Settings(_env_file=None, fetch_users=True, fetch_files=True)
    monkeypatch.setattr(cli, "get_settings", lambda: settings)

    defaults = parse(PERMALINK)
    overridden = parse(PERMALINK, "--no-users", "--no-files", "--channel")

    assert defaults.users is True
    assert defaults.files is True
    assert overridden.users is False
    assert overridden.files is False
    assert overridden.channel is True
