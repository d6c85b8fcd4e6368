"""Replace the body of one section, keep its heading and all the others."""

from pespunte import Heading, Rewritten, exact_text, rewrite

source = """# Project

## Install

    pip install old-name

## Usage

Run it.
"""


def new_install(region, writer) -> None:
    writer.insert("    pip install pespunte\n")


# Open on the first event after the "Install" heading line, close on the next h2
start = exact_text("Install").then_start_of_next_line()
program = Rewritten(start, Heading(2), new_install)

print(rewrite(source, program))
