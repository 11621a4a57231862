"""
Top-level CLI that aggregates the restore commands.
"""

import typer

from cbfsrestore.cli.restore_cli import restore_cmd, settings_cmd

main_app = typer.Typer(help="cbfs-restore CLI")

main_app.command("restore")(restore_cmd)
main_app.command("settings")(settings_cmd)


def main():
    main_app()

if __name__ == "__main__":
    main()
