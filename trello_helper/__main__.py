"""Allow ``python -m trello_helper``."""

from trello_helper.cli import main

main()
