# shortcut_dock/main.py

from pathlib import Path

import click

from shortcut_dock.cli.main import sdock


@click.group(context_settings=dict(help_option_names=['-h', '--help']))
def main():
    """
    Shortcut Dock: a dual mode (CLI + GUI) shortcut launcher.

    Example (GUI): python -m shortcut_dock.main gui
    Example (CLI): python -m shortcut_dock.main cli add ~/notes.txt
    """


@click.command()
@click.option('--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Path to a settings.json to use instead of the default one.")
def gui(config_path):
    """Launches the graphical user interface."""
    # Imported here so the CLI never needs a display.
    from shortcut_dock.gui.main_window import run_gui
    run_gui(config_path)


main.add_command(gui)
main.add_command(sdock, name='cli')

if __name__ == '__main__':
    main()
