"""
Tests for the `chat` command.
"""
from click.testing import CliRunner
from sqlalchemy import inspect

from chat.cli import main


def test_migrate_down_then_up(engine):
    runner = CliRunner()

    result = runner.invoke(main, ["migrate", "down"])
    assert result.exit_code == 0, result.output
    assert "message" not in inspect(engine).get_table_names()

    result = runner.invoke(main, ["migrate", "up"])
    assert result.exit_code == 0, result.output
    tables = set(inspect(engine).get_table_names())
    assert {"message", "text_message", "image_message", "video_message", "message_type", "video_source"} <= tables


def test_migrate_rejects_unknown_direction():
    result = CliRunner().invoke(main, ["migrate", "sideways"])
    assert result.exit_code != 0
