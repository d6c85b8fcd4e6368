"""Add a note under the title: everything else stays byte-for-byte."""

from pespunte import Heading, Rewritten, rewrite


def add_note(region, writer) -> None:
    writer.copy_through(region.events[-1].end)
    writer.insert("\n> Generated file, do not edit.\n")


source = "# Title\n\nBody text.\n"
program = Rewritten(Heading(1), Heading(1).then_start_of_next_line(), add_note)
print(rewrite(source, program))
